"""Dead and live oil property evaluators and their construction from raw tables."""

from abc import ABC, abstractmethod
import logging
import typing

import attrs
import numpy as np

from oilpvt.config import Config
from oilpvt.constants import c
from oilpvt.tables.pvt import DeadOilTable, LiveOilTable
from oilpvt.tables.raw import RawPropertyTable, make_interpolants, validate_raw_table
from oilpvt.types import ArrayLike, Converter, Graph, OneDimensionalGrid, RawCurve
from oilpvt.units import (
    UnitSystem,
    dead_oil_unit_converter,
    live_oil_unit_converter,
)

logger = logging.getLogger(__name__)

__all__ = [
    "PVTEvaluator",
    "DeadOil",
    "LiveOil",
    "extract_primary_key",
    "create_pvt_function",
]


class PVTEvaluator(ABC):
    """
    Common interface of the oil property evaluators of a single region.

    Callers never need to know which kind of table backs an evaluator. Dead oil
    evaluators accept the dissolved gas-oil ratio argument and ignore it.
    """

    @abstractmethod
    def formation_volume_factor(
        self, rs: ArrayLike, po: ArrayLike
    ) -> OneDimensionalGrid:
        """
        Oil formation volume factor.

        :param rs: Dissolved gas-oil ratios (sm³/sm³)
        :param po: Oil pressures (Pa), same length as `rs`
        :return: B (rm³/sm³), one value per (rs, po) point
        """
        ...

    @abstractmethod
    def viscosity(self, rs: ArrayLike, po: ArrayLike) -> OneDimensionalGrid:
        """
        Oil viscosity.

        :param rs: Dissolved gas-oil ratios (sm³/sm³)
        :param po: Oil pressures (Pa), same length as `rs`
        :return: Viscosity (Pa·s), one value per (rs, po) point
        """
        ...

    @abstractmethod
    def get_pvt_curve(self, curve: RawCurve) -> typing.List[Graph]:
        """Tabulated nodes of a property curve, for plotting."""
        ...

    @abstractmethod
    def clone(self) -> "PVTEvaluator":
        """Independent copy, sharing no node storage with this evaluator."""
        ...


@attrs.frozen
class DeadOil(PVTEvaluator):
    table: DeadOilTable

    def formation_volume_factor(
        self, rs: ArrayLike, po: ArrayLike
    ) -> OneDimensionalGrid:
        return self.table.formation_volume_factor(po)

    def viscosity(self, rs: ArrayLike, po: ArrayLike) -> OneDimensionalGrid:
        return self.table.viscosity(po)

    def get_pvt_curve(self, curve: RawCurve) -> typing.List[Graph]:
        return [self.table.get_pvt_curve(curve)]

    def clone(self) -> "DeadOil":
        return DeadOil(table=self.table.clone())


@attrs.frozen
class LiveOil(PVTEvaluator):
    table: LiveOilTable

    def formation_volume_factor(
        self, rs: ArrayLike, po: ArrayLike
    ) -> OneDimensionalGrid:
        return self.table.formation_volume_factor(rs, po)

    def viscosity(self, rs: ArrayLike, po: ArrayLike) -> OneDimensionalGrid:
        return self.table.viscosity(rs, po)

    def get_pvt_curve(self, curve: RawCurve) -> typing.List[Graph]:
        graphs = self.table.get_pvt_curve(curve)
        if curve != RawCurve.SATURATED_STATE:
            return graphs

        # Saturated state curve of live oil comes as (Rs, Po).
        # Swap to the normalised (Po, Rs) order.
        return [(y, x) for x, y in graphs]

    def clone(self) -> "LiveOil":
        return LiveOil(table=self.table.clone())


def _create_dead_oil(
    raw: RawPropertyTable,
    usys: typing.Union[int, UnitSystem],
    config: Config,
) -> typing.List[PVTEvaluator]:
    convert = dead_oil_unit_converter(usys, constants=config.constants)
    return make_interpolants(
        raw,
        lambda pressures, columns: DeadOil(
            table=DeadOilTable.from_columns(
                pressures,
                columns,
                convert=convert,
                sentinel_threshold=config.sentinel_threshold,
                warn_on_extrapolation=config.warn_on_extrapolation,
            )
        ),
    )


def extract_primary_key(
    raw: RawPropertyTable,
    table: int,
    convert_key: Converter,
    sentinel_threshold: float = 1.0e20,
) -> OneDimensionalGrid:
    """
    Primary key nodes of one table, with sentinel padding removed and converted to SI.

    :param raw: A validated raw table
    :param table: Index of the table (region)
    :param convert_key: Converter for the primary key
    :param sentinel_threshold: Magnitude marking unused key slots
    :return: The valid key nodes, in table order
    """
    start = table * raw.num_primary
    key = raw.primary_key[start : start + raw.num_primary]
    return np.asarray(convert_key(key[np.abs(key) < sentinel_threshold]))


def _create_live_oil(
    raw: RawPropertyTable,
    usys: typing.Union[int, UnitSystem],
    config: Config,
) -> typing.List[PVTEvaluator]:
    convert_key, convert = live_oil_unit_converter(usys, constants=config.constants)

    # Sub-tables without valid nodes become invalid instead of failing the build.
    subtables = make_interpolants(
        raw,
        lambda pressures, columns: DeadOilTable.from_columns(
            pressures,
            columns,
            convert=convert,
            sentinel_threshold=config.sentinel_threshold,
            allow_empty=True,
            warn_on_extrapolation=config.warn_on_extrapolation,
        ),
    )

    evaluators: typing.List[PVTEvaluator] = []
    for table in range(raw.num_tables):
        key = extract_primary_key(
            raw, table, convert_key, sentinel_threshold=config.sentinel_threshold
        )
        begin = table * raw.num_primary
        end = begin + key.size

        num_invalid = sum(not subtable.is_valid for subtable in subtables[begin:end])
        if num_invalid:
            logger.debug(
                f"Live oil table {table} has {num_invalid} sub-table(s) without valid nodes"
            )
        evaluators.append(
            LiveOil(table=LiveOilTable(key=key, subtables=subtables[begin:end]))
        )
    return evaluators


def create_pvt_function(
    raw: RawPropertyTable,
    usys: typing.Union[int, UnitSystem],
    config: typing.Optional[Config] = None,
) -> typing.List[PVTEvaluator]:
    """
    Build one oil property evaluator per table (region) of a raw table.

    Tables with a single primary key node are dead oil tables, all others are
    live oil tables keyed by dissolved gas-oil ratio.

    :param raw: Raw oil PVT table
    :param usys: Unit system of the raw table
    :param config: Build options
    :return: Evaluators, one per region
    :raises ShapeError: If the raw table is malformed
    """
    config = config or Config()
    constants = config.constants if config.constants is not None else c
    validate_raw_table(raw, num_cols=constants.PVT_OIL_COLUMNS)

    if raw.num_primary == 1:
        evaluators = _create_dead_oil(raw, usys, config)
        kind = "dead"
    else:
        evaluators = _create_live_oil(raw, usys, config)
        kind = "live"

    logger.debug(
        f"Built {len(evaluators)} {kind} oil PVT evaluator(s)"
        + (f" for {config.label!r}" if config.label else "")
    )
    return evaluators
