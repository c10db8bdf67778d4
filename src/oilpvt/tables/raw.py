import logging
import typing

import attrs
import numpy as np

from oilpvt.errors import ShapeError
from oilpvt.types import OneDimensionalGrid

logger = logging.getLogger(__name__)

__all__ = ["RawPropertyTable", "validate_raw_table", "make_interpolants"]

T = typing.TypeVar("T")


def _as_float_array(value: typing.Any) -> np.ndarray:
    array = np.array(value, dtype=np.float64).ravel()
    array.setflags(write=False)
    return array


@attrs.frozen(eq=False)
class RawPropertyTable:
    """
    Flat description of a set of tabulated property functions, one set per region.

    The `data` array holds `num_cols` column blocks. Each block stores
    `num_rows * num_primary * num_tables` values, sub-table by sub-table
    (tables outermost, then primary key nodes), with `num_rows` consecutive
    values per sub-table. Column 0 is the independent variable.

    Unused primary key slots and unused rows are padded with sentinel values
    (magnitude >= 1e20).
    """

    num_primary: int
    """Number of primary key nodes per table. 1 for tables without a primary key (e.g. dead oil)."""
    num_rows: int
    """Number of rows (independent variable nodes) per sub-table."""
    num_cols: int
    """Number of columns, independent variable included."""
    num_tables: int
    """Number of tables, one per region."""
    primary_key: OneDimensionalGrid = attrs.field(converter=_as_float_array)
    """Primary key values, `num_primary` per table."""
    data: OneDimensionalGrid = attrs.field(converter=_as_float_array)
    """Condensed table data, column blocks as described above."""

    @property
    def num_subtables(self) -> int:
        """Total number of sub-tables across all tables."""
        return self.num_primary * self.num_tables


def validate_raw_table(raw: RawPropertyTable, num_cols: int = 5) -> None:
    """
    Check the shape invariants of an oil PVT raw table.

    :param raw: The raw table to check
    :param num_cols: Required number of columns
    :raises ShapeError: If the table is malformed
    """
    if raw.num_primary == 0:
        raise ShapeError("Oil PVT Table Without Primary Lookup Key")

    if raw.num_cols != num_cols:
        raise ShapeError(
            f"PVT Table for Oil Must Have {num_cols} Columns, got {raw.num_cols}"
        )

    expected_keys = raw.num_primary * raw.num_tables
    if raw.primary_key.size != expected_keys:
        raise ShapeError(
            f"Size Mismatch in RS Nodes of PVT Table for Oil. "
            f"Expected {expected_keys}, got {raw.primary_key.size}"
        )

    expected_data = raw.num_primary * raw.num_rows * raw.num_cols * raw.num_tables
    if raw.data.size != expected_data:
        raise ShapeError(
            f"Size Mismatch in Condensed Table Data of PVT Table for Oil. "
            f"Expected {expected_data}, got {raw.data.size}"
        )


def make_interpolants(
    raw: RawPropertyTable,
    construct: typing.Callable[
        [OneDimensionalGrid, typing.Sequence[OneDimensionalGrid]], T
    ],
) -> typing.List[T]:
    """
    Build one interpolant per sub-table of a raw table.

    `construct` receives the independent variable of the sub-table and its
    `num_cols - 1` dependent columns, all of length `num_rows`.

    :param raw: A validated raw table
    :param construct: Factory called once per sub-table
    :return: List of `num_primary * num_tables` interpolants, in table order
    """
    num_subtables = raw.num_subtables
    block = num_subtables * raw.num_rows
    columns = raw.data.reshape(raw.num_cols, block)

    interpolants = []
    for i in range(num_subtables):
        start = i * raw.num_rows
        stop = start + raw.num_rows
        x = columns[0, start:stop]
        y = [columns[col, start:stop] for col in range(1, raw.num_cols)]
        interpolants.append(construct(x, y))

    logger.debug(f"Built {len(interpolants)} sub-table interpolants")
    return interpolants
