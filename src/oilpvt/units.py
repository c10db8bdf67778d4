"""
Unit systems of tabulated PVT data and conversion of table columns to SI.

Raw tables are stored in the unit system of the deck they were built from.
Every value is converted to strict SI once, when the interpolants are built,
so that queries (pressures in Pa, dissolved gas-oil ratios in sm³/sm³) never
convert anything.
"""

import typing

import attrs

from oilpvt.constants import Constants, c
from oilpvt.errors import UnitSystemError
from oilpvt.types import Converter, FloatOrArray

__all__ = [
    "UnitSystem",
    "SI",
    "METRIC",
    "FIELD",
    "LAB",
    "PVT_M",
    "create_unit_system",
    "Scale",
    "ToSI",
    "ConvertUnits",
    "dead_oil_unit_converter",
    "live_oil_unit_converter",
]


@attrs.frozen
class UnitSystem:
    """
    Scale factors, relative to SI, of the quantities found in PVT tables.

    Each factor is the SI value of one unit of the quantity in this unit system.
    """

    name: str
    pressure: float
    """Pressure unit (Pa)."""
    reservoir_volume: float
    """Reservoir volume unit of liquid (m³)."""
    surface_volume_liquid: float
    """Surface volume unit of liquid (m³)."""
    surface_volume_gas: float
    """Surface volume unit of gas (m³)."""
    viscosity: float
    """Viscosity unit (Pa·s)."""
    density: float
    """Mass density unit (kg/m³)."""


SI = UnitSystem(
    name="SI",
    pressure=1.0,
    reservoir_volume=1.0,
    surface_volume_liquid=1.0,
    surface_volume_gas=1.0,
    viscosity=1.0,
    density=1.0,
)
"""Strict SI. Tables already in SI pass through unchanged."""

METRIC = 1
FIELD = 2
LAB = 3
PVT_M = 4

_UNIT_SYSTEM_NAMES = {METRIC: "METRIC", FIELD: "FIELD", LAB: "LAB", PVT_M: "PVT-M"}


def create_unit_system(
    usys: typing.Union[int, UnitSystem], constants: typing.Optional[Constants] = None
) -> UnitSystem:
    """
    Resolve a unit system identifier.

    Integer identifiers follow the result file convention:
    1 = METRIC, 2 = FIELD, 3 = LAB, 4 = PVT-M.

    :param usys: Unit system identifier, or an already resolved `UnitSystem`
    :param constants: Constants store to read conversion factors from. Defaults to
        the constants of the current context.
    :return: The resolved `UnitSystem`
    :raises UnitSystemError: If the identifier is not recognised
    """
    if isinstance(usys, UnitSystem):
        return usys

    k = constants if constants is not None else c
    if usys == METRIC:
        return UnitSystem(
            name=_UNIT_SYSTEM_NAMES[usys],
            pressure=k.BAR,
            reservoir_volume=k.CUBIC_METRE,
            surface_volume_liquid=k.CUBIC_METRE,
            surface_volume_gas=k.CUBIC_METRE,
            viscosity=k.CENTI_POISE,
            density=k.KILOGRAM / k.CUBIC_METRE,
        )
    if usys == FIELD:
        return UnitSystem(
            name=_UNIT_SYSTEM_NAMES[usys],
            pressure=k.PSIA,
            reservoir_volume=k.STB,
            surface_volume_liquid=k.STB,
            surface_volume_gas=k.MSCF,
            viscosity=k.CENTI_POISE,
            density=k.POUND / k.CUBIC_FOOT,
        )
    if usys == LAB:
        return UnitSystem(
            name=_UNIT_SYSTEM_NAMES[usys],
            pressure=k.ATM,
            reservoir_volume=k.CUBIC_CENTIMETRE,
            surface_volume_liquid=k.CUBIC_CENTIMETRE,
            surface_volume_gas=k.CUBIC_CENTIMETRE,
            viscosity=k.CENTI_POISE,
            density=k.GRAM / k.CUBIC_CENTIMETRE,
        )
    if usys == PVT_M:
        return UnitSystem(
            name=_UNIT_SYSTEM_NAMES[usys],
            pressure=k.ATM,
            reservoir_volume=k.CUBIC_METRE,
            surface_volume_liquid=k.CUBIC_METRE,
            surface_volume_gas=k.CUBIC_METRE,
            viscosity=k.CENTI_POISE,
            density=k.KILOGRAM / k.CUBIC_METRE,
        )
    raise UnitSystemError(
        f"Unsupported unit system identifier {usys!r}. "
        f"Must be one of: {sorted(_UNIT_SYSTEM_NAMES)}"
    )


@attrs.frozen
class Scale:
    """Multiplicative converter from a table unit to SI."""

    factor: float

    def __call__(self, value: FloatOrArray) -> FloatOrArray:
        return value * self.factor


class ToSI:
    """Converters to SI for the quantities stored in oil PVT tables."""

    @staticmethod
    def pressure(usys: UnitSystem) -> Scale:
        return Scale(usys.pressure)

    @staticmethod
    def dissolved_gas(usys: UnitSystem) -> Scale:
        # Rs = gas surface volume / liquid surface volume
        return Scale(usys.surface_volume_gas / usys.surface_volume_liquid)

    @staticmethod
    def reciprocal_fvf(usys: UnitSystem) -> Scale:
        # 1/B = liquid surface volume / reservoir volume
        return Scale(usys.surface_volume_liquid / usys.reservoir_volume)

    @staticmethod
    def reciprocal_fvf_viscosity(usys: UnitSystem) -> Scale:
        return Scale(
            usys.surface_volume_liquid / (usys.reservoir_volume * usys.viscosity)
        )

    @staticmethod
    def reciprocal_fvf_pressure_derivative(usys: UnitSystem) -> Scale:
        return Scale(ToSI.reciprocal_fvf(usys).factor / usys.pressure)

    @staticmethod
    def reciprocal_fvf_viscosity_pressure_derivative(usys: UnitSystem) -> Scale:
        return Scale(ToSI.reciprocal_fvf_viscosity(usys).factor / usys.pressure)

    @staticmethod
    def density(usys: UnitSystem) -> Scale:
        return Scale(usys.density)


@attrs.frozen
class ConvertUnits:
    """
    Unit converters for one sub-table of an oil PVT table.

    Column order is [1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo]. The independent
    variable (Po) is converted by `independent`.
    """

    independent: Converter
    column: typing.Tuple[Converter, Converter, Converter, Converter]

    def __attrs_post_init__(self) -> None:
        if len(self.column) != 4:
            raise UnitSystemError(
                f"Oil PVT tables need exactly 4 column converters, got {len(self.column)}"
            )


def dead_oil_unit_converter(
    usys: typing.Union[int, UnitSystem], constants: typing.Optional[Constants] = None
) -> ConvertUnits:
    """
    Build the converters for a dead oil table, [Po, 1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo].

    :param usys: Unit system identifier of the table
    :param constants: Optional constants store with the conversion factors
    :return: `ConvertUnits` for the table columns
    """
    u = create_unit_system(usys, constants=constants)
    return ConvertUnits(
        independent=ToSI.pressure(u),
        column=(
            ToSI.reciprocal_fvf(u),
            ToSI.reciprocal_fvf_viscosity(u),
            ToSI.reciprocal_fvf_pressure_derivative(u),
            ToSI.reciprocal_fvf_viscosity_pressure_derivative(u),
        ),
    )


def live_oil_unit_converter(
    usys: typing.Union[int, UnitSystem], constants: typing.Optional[Constants] = None
) -> typing.Tuple[Converter, ConvertUnits]:
    """
    Build the converters for a live oil table.

    The primary key is the dissolved gas-oil ratio (Rs) and every sub-table has the
    dead oil table format.

    :param usys: Unit system identifier of the table
    :param constants: Optional constants store with the conversion factors
    :return: Tuple of (Rs converter, sub-table converters)
    """
    u = create_unit_system(usys, constants=constants)
    return ToSI.dissolved_gas(u), dead_oil_unit_converter(u)
