import typing

import pytest

from oilpvt import RawPropertyTable, SI, OilPVT

Row = typing.Tuple[float, float, float, float, float]
"""(Po, 1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo)"""

SENTINEL = 2.0e20
SENTINEL_ROW: Row = (SENTINEL, 0.0, 0.0, 0.0, 0.0)


def build_raw_table(
    tables: typing.Sequence[typing.Sequence[typing.Sequence[Row]]],
    primary_keys: typing.Sequence[typing.Sequence[float]],
    num_primary: int,
    num_rows: int,
) -> RawPropertyTable:
    """
    Lay out per-table, per-key sub-tables into the condensed column block format,
    padding unused keys and rows with sentinels.
    """
    columns: typing.List[typing.List[float]] = [[] for _ in range(5)]
    keys: typing.List[float] = []
    for subtables, table_keys in zip(tables, primary_keys):
        keys.extend(list(table_keys) + [SENTINEL] * (num_primary - len(table_keys)))
        padded = list(subtables) + [[]] * (num_primary - len(subtables))
        for rows in padded:
            for row in list(rows) + [SENTINEL_ROW] * (num_rows - len(rows)):
                for col, value in enumerate(row):
                    columns[col].append(value)

    return RawPropertyTable(
        num_primary=num_primary,
        num_rows=num_rows,
        num_cols=5,
        num_tables=len(tables),
        primary_key=keys,
        data=[value for column in columns for value in column],
    )


# Three Rs nodes, each with two pressure nodes. Values in SI.
LIVE_SUBTABLES: typing.List[typing.List[Row]] = [
    [(100.0, 0.90, 0.45, -2e-4, -1e-4), (200.0, 0.88, 0.44, -2e-4, -1e-4)],
    [(150.0, 0.80, 0.80, -2e-4, -1e-4), (250.0, 0.78, 0.78, -2e-4, -1e-4)],
    [(200.0, 0.70, 1.40, -2e-4, -1e-4), (300.0, 0.68, 1.36, -2e-4, -1e-4)],
]
LIVE_KEYS = [10.0, 20.0, 30.0]

DEAD_ROWS: typing.List[Row] = [
    (1.0, 1.0, 0.5, -0.2, -0.1),
    (2.0, 0.9, 0.45, -0.1, -0.05),
    (3.0, 0.8, 0.4, -0.3, -0.15),
]


@pytest.fixture
def dead_raw_table() -> RawPropertyTable:
    """Two dead oil regions in SI. Region 1 has twice the viscosity of region 0."""
    region_1 = [(p, b, bmu / 2, db, dbmu / 2) for p, b, bmu, db, dbmu in DEAD_ROWS]
    return build_raw_table(
        tables=[[DEAD_ROWS], [region_1]],
        primary_keys=[[0.0], [0.0]],
        num_primary=1,
        num_rows=4,
    )


@pytest.fixture
def live_raw_table() -> RawPropertyTable:
    """Two live oil regions in SI, each with one unused (sentinel) Rs slot."""
    return build_raw_table(
        tables=[LIVE_SUBTABLES, LIVE_SUBTABLES[:2]],
        primary_keys=[LIVE_KEYS, LIVE_KEYS[:2]],
        num_primary=4,
        num_rows=3,
    )


@pytest.fixture
def dead_oil(dead_raw_table: RawPropertyTable) -> OilPVT:
    return OilPVT(dead_raw_table, usys=SI, surface_mass_densities=[850.0, 860.0])


@pytest.fixture
def live_oil(live_raw_table: RawPropertyTable) -> OilPVT:
    return OilPVT(live_raw_table, usys=SI, surface_mass_densities=[800.0, 810.0])
