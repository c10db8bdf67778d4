"""
Extraction of oil PVT tables from the keyword arrays of a result INIT file.

Only already decoded arrays are handled here (INTEHEAD, TABDIMS and TAB as
sequences of numbers). Reading the binary file itself is left to a file reader.
TABDIMS offsets into TAB are 1-based.
"""

import typing

import numpy as np

from oilpvt.constants import Constants
from oilpvt.errors import ShapeError
from oilpvt.tables.raw import RawPropertyTable
from oilpvt.types import OneDimensionalGrid
from oilpvt.units import ToSI, create_unit_system

__all__ = [
    "oil_is_active",
    "unit_system_from_init",
    "raw_table_from_init",
    "surface_mass_density_from_init",
]

INTEHEAD_UNIT_INDEX = 2
INTEHEAD_PHASE_INDEX = 14

TABDIMS_IBPVTO_OFFSET_ITEM = 6
"""Start of the PVTO table data in TAB."""
TABDIMS_JBPVTO_OFFSET_ITEM = 7
"""Start of the PVTO Rs nodes in TAB."""
TABDIMS_NRPVTO_ITEM = 8
"""Number of Rs nodes per PVTO table."""
TABDIMS_NPPVTO_ITEM = 9
"""Number of pressure nodes per PVTO sub-table."""
TABDIMS_NTPVTO_ITEM = 10
"""Number of PVTO tables."""
TABDIMS_IBDENS_OFFSET_ITEM = 18
"""Start of the surface density table in TAB."""
TABDIMS_NTDENS_ITEM = 19
"""Number of surface density tables."""

# Phase columns of the surface density table
_DENSITY_OIL_COLUMN = 0

_PHASE_OIL_BIT = 1 << 0


def oil_is_active(intehead: typing.Sequence[int]) -> bool:
    """Whether the oil phase is active, from the INTEHEAD phase bit mask."""
    return (int(intehead[INTEHEAD_PHASE_INDEX]) & _PHASE_OIL_BIT) != 0


def unit_system_from_init(intehead: typing.Sequence[int]) -> int:
    """Unit system identifier stored in INTEHEAD."""
    return int(intehead[INTEHEAD_UNIT_INDEX])


def _slice_tab(
    tab: np.ndarray, start: int, count: int, what: str
) -> OneDimensionalGrid:
    if start < 0 or start + count > tab.size:
        raise ShapeError(
            f"{what} [{start}, {start + count}) is outside TAB of size {tab.size}"
        )
    return tab[start : start + count]


def raw_table_from_init(
    tabdims: typing.Sequence[int], tab: typing.Sequence[float]
) -> RawPropertyTable:
    """
    Build the raw oil PVT table from TABDIMS and TAB.

    :param tabdims: Table dimensions array
    :param tab: Condensed tables array
    :return: Raw table with columns [Po, 1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo]
    :raises ShapeError: If TABDIMS points outside of TAB
    """
    tab = np.asarray(tab, dtype=np.float64)
    num_primary = int(tabdims[TABDIMS_NRPVTO_ITEM])
    num_rows = int(tabdims[TABDIMS_NPPVTO_ITEM])
    num_tables = int(tabdims[TABDIMS_NTPVTO_ITEM])
    num_cols = 5

    primary_key = _slice_tab(
        tab,
        start=int(tabdims[TABDIMS_JBPVTO_OFFSET_ITEM]) - 1,
        count=num_primary * num_tables,
        what="PVTO Rs nodes",
    )
    data = _slice_tab(
        tab,
        start=int(tabdims[TABDIMS_IBPVTO_OFFSET_ITEM]) - 1,
        count=num_primary * num_rows * num_cols * num_tables,
        what="PVTO table data",
    )
    return RawPropertyTable(
        num_primary=num_primary,
        num_rows=num_rows,
        num_cols=num_cols,
        num_tables=num_tables,
        primary_key=primary_key,
        data=data,
    )


def surface_mass_density_from_init(
    tabdims: typing.Sequence[int],
    tab: typing.Sequence[float],
    usys: int,
    constants: typing.Optional[Constants] = None,
) -> OneDimensionalGrid:
    """
    Oil surface mass densities (kg/m³) of every density region.

    :param tabdims: Table dimensions array
    :param tab: Condensed tables array
    :param usys: Unit system identifier of the tables
    :param constants: Optional constants store with the conversion factors
    :return: One density per region
    """
    tab = np.asarray(tab, dtype=np.float64)
    num_regions = int(tabdims[TABDIMS_NTDENS_ITEM])
    start = int(tabdims[TABDIMS_IBDENS_OFFSET_ITEM]) - 1
    densities = _slice_tab(
        tab,
        start=start + _DENSITY_OIL_COLUMN * num_regions,
        count=num_regions,
        what="Oil surface densities",
    )
    convert = ToSI.density(create_unit_system(usys, constants=constants))
    return np.asarray(convert(densities))
