import numpy as np
import pytest

from conftest import DEAD_ROWS
from oilpvt import (
    FIELD,
    METRIC,
    OilPVT,
    RawCurve,
    ShapeError,
    oil_is_active,
    raw_table_from_init,
    surface_mass_density_from_init,
    unit_system_from_init,
)


def _init_arrays(usys=METRIC, phases=0b111):
    """
    INTEHEAD, TABDIMS and TAB for a single dead oil table with three pressure nodes.

    TAB holds the density table (oil, water, gas), then the Rs nodes, then the
    PVTO table data.
    """
    intehead = [0] * 20
    intehead[2] = usys
    intehead[14] = phases

    densities = [850.0, 1000.0, 0.9]
    key = [0.0]
    data = [value for column in zip(*DEAD_ROWS) for value in column]
    tab = densities + key + data

    tabdims = [0] * 30
    tabdims[18] = 1  # IBDENS
    tabdims[19] = 1  # NTDENS
    tabdims[7] = 1 + len(densities)  # JBPVTO
    tabdims[6] = 1 + len(densities) + len(key)  # IBPVTO
    tabdims[8] = 1  # NRPVTO
    tabdims[9] = len(DEAD_ROWS)  # NPPVTO
    tabdims[10] = 1  # NTPVTO
    return intehead, tabdims, tab


def test_header_items():
    intehead, _, _ = _init_arrays(usys=FIELD, phases=0b010)
    assert unit_system_from_init(intehead) == FIELD
    assert not oil_is_active(intehead)
    assert oil_is_active(_init_arrays(phases=0b001)[0])


def test_raw_table_from_init():
    _, tabdims, tab = _init_arrays()
    raw = raw_table_from_init(tabdims, tab)

    assert (raw.num_primary, raw.num_rows, raw.num_cols, raw.num_tables) == (1, 3, 5, 1)
    np.testing.assert_array_equal(raw.primary_key, [0.0])
    np.testing.assert_array_equal(raw.data[:3], [1.0, 2.0, 3.0])
    assert raw.data.size == 15


def test_offsets_outside_tab():
    _, tabdims, tab = _init_arrays()
    tabdims[6] = len(tab)
    with pytest.raises(ShapeError):
        raw_table_from_init(tabdims, tab)


def test_surface_mass_density_conversion():
    _, tabdims, tab = _init_arrays()
    np.testing.assert_allclose(
        surface_mass_density_from_init(tabdims, tab, METRIC), [850.0]
    )
    np.testing.assert_allclose(
        surface_mass_density_from_init(tabdims, tab, FIELD),
        [850.0 * 0.45359237 / 0.028316846592],
    )


def test_oil_pvt_from_init():
    oil = OilPVT.from_init(*_init_arrays())

    assert oil is not None
    assert oil.num_regions == 1
    assert oil.surface_mass_density(0) == pytest.approx(850.0)
    [(pressures, fvf)] = oil.get_pvt_curve(RawCurve.FVF, 0)
    np.testing.assert_allclose(pressures, [1.0e5, 2.0e5, 3.0e5])
    np.testing.assert_allclose(fvf, [1.0, 1 / 0.9, 1 / 0.8])


def test_no_oil_pvt_without_oil_phase():
    assert OilPVT.from_init(*_init_arrays(phases=0b110)) is None
