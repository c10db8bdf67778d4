import numpy as np
import pytest

from oilpvt import (
    FIELD,
    LAB,
    METRIC,
    PVT_M,
    SI,
    Constant,
    Constants,
    UnitSystemError,
    create_unit_system,
    dead_oil_unit_converter,
    get_constant,
    live_oil_unit_converter,
)


def test_metric_dead_oil_converter():
    convert = dead_oil_unit_converter(METRIC)

    assert convert.independent(1.0) == pytest.approx(1.0e5)
    recip_fvf, recip_fvf_visc, d_recip_fvf, d_recip_fvf_visc = convert.column
    assert recip_fvf(1.0) == pytest.approx(1.0)
    # 1/(B*mu) with mu in cP
    assert recip_fvf_visc(1.0) == pytest.approx(1.0e3)
    assert d_recip_fvf(1.0) == pytest.approx(1.0 / 1.0e5)
    assert d_recip_fvf_visc(1.0) == pytest.approx(1.0e3 / 1.0e5)


def test_derivative_columns_scale_by_pressure_unit():
    for usys in (METRIC, FIELD, LAB, PVT_M):
        convert = dead_oil_unit_converter(usys)
        pressure = convert.independent(1.0)
        recip_fvf, recip_fvf_visc, d_recip_fvf, d_recip_fvf_visc = convert.column
        assert d_recip_fvf(1.0) == pytest.approx(recip_fvf(1.0) / pressure)
        assert d_recip_fvf_visc(1.0) == pytest.approx(recip_fvf_visc(1.0) / pressure)


def test_field_live_oil_converter():
    convert_key, convert = live_oil_unit_converter(FIELD)

    # Rs in Mscf/stb
    assert convert_key(1.0) == pytest.approx(28.316846592 / 0.158987294928)
    assert convert.independent(14.7) == pytest.approx(14.7 * 6894.757293168361)


def test_lab_and_pvt_m_use_atmospheres():
    assert create_unit_system(LAB).pressure == pytest.approx(101325.0)
    assert create_unit_system(PVT_M).pressure == pytest.approx(101325.0)
    assert create_unit_system(LAB).density == pytest.approx(1000.0)


def test_converters_apply_elementwise():
    convert = dead_oil_unit_converter(METRIC)
    np.testing.assert_allclose(
        convert.independent(np.array([1.0, 2.0])), [1.0e5, 2.0e5]
    )


def test_si_passes_values_through():
    convert_key, convert = live_oil_unit_converter(SI)
    assert convert_key(42.0) == 42.0
    assert convert.independent(42.0) == 42.0
    assert all(column(3.0) == 3.0 for column in convert.column)


@pytest.mark.parametrize("usys", [0, 5, -1])
def test_unknown_unit_system_is_rejected(usys):
    with pytest.raises(UnitSystemError):
        create_unit_system(usys)
    with pytest.raises(ValueError):
        dead_oil_unit_converter(usys)


def test_constants_override():
    constants = Constants({"BAR": 2.0e5})
    assert create_unit_system(METRIC, constants=constants).pressure == 2.0e5
    assert create_unit_system(METRIC).pressure == 1.0e5


def test_constants_context():
    with Constants({"PSIA": 1.0})():
        assert create_unit_system(FIELD).pressure == 1.0
    assert create_unit_system(FIELD).pressure == pytest.approx(6894.757293168361)


def test_constant_metadata():
    bar = get_constant("BAR")
    assert bar.value == 1.0e5
    assert bar.unit == "Pa"
    assert get_constant("NOT_A_CONSTANT") is None

    constants = Constants({"BAR": Constant(value=2.0e5, unit="Pa")})
    assert constants.get_constant("BAR").value == 2.0e5
    assert constants["PSIA"].unit == "Pa"
    with constants():
        assert get_constant("BAR").value == 2.0e5
    assert get_constant("BAR").value == 1.0e5
