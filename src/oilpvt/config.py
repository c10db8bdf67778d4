import typing

import attrs

from oilpvt.constants import Constants, c

__all__ = ["Config"]


@attrs.frozen
class Config:
    """Options controlling how oil PVT tables are built and queried."""

    sentinel_threshold: float = attrs.field(
        factory=lambda: c.SENTINEL_THRESHOLD, validator=attrs.validators.gt(0)
    )
    """
    Magnitude at or above which a primary key or independent variable entry
    marks an unused (padding) slot of the raw table.
    """
    warn_on_extrapolation: bool = False
    """
    Whether to log a warning when pressures are queried outside the tabulated
    range of a sub-table. No warnings by default to avoid log spam.
    """
    constants: typing.Optional[Constants] = None
    """
    Conversion factors used when resolving unit systems. Defaults to the
    constants of the current context (`oilpvt.c`).
    """
    label: typing.Optional[str] = None
    """Optional label used in log messages to identify the table set."""
