import logging
import typing

import numpy as np
from typing_extensions import Self

from oilpvt.config import Config
from oilpvt.errors import OutOfRangeError
from oilpvt.evaluators import PVTEvaluator, create_pvt_function
from oilpvt.init_data import (
    oil_is_active,
    raw_table_from_init,
    surface_mass_density_from_init,
    unit_system_from_init,
)
from oilpvt.tables.raw import RawPropertyTable
from oilpvt.types import ArrayLike, Graph, OneDimensionalGrid, RawCurve
from oilpvt.units import UnitSystem

logger = logging.getLogger(__name__)

__all__ = ["OilPVT"]


class OilPVT:
    """
    Oil PVT properties of every region (PVT table) of a model.

    Holds one property evaluator and one surface mass density per region. All
    queries take a 0-based region index and arrays of dissolved gas-oil ratios
    (sm³/sm³) and oil pressures (Pa), and return SI values.

    The object is read-only once built, so it can be queried concurrently.
    Copying (`copy.copy`, `copy.deepcopy` or `OilPVT.copy`) duplicates every
    evaluator. The copy shares no table storage with the original.

    Example:
    ```python
    import oilpvt

    raw = oilpvt.RawPropertyTable(
        num_primary=1,
        num_rows=3,
        num_cols=5,
        num_tables=1,
        primary_key=[0.0],
        data=[...],
    )
    oil = oilpvt.OilPVT(raw, usys=oilpvt.METRIC, surface_mass_densities=[850.0])
    fvf = oil.formation_volume_factor(0, rs=[0.0], po=[200.0e5])
    ```
    """

    __slots__ = ("_evaluators", "_densities", "_config")

    def __init__(
        self,
        raw: RawPropertyTable,
        usys: typing.Union[int, UnitSystem],
        surface_mass_densities: ArrayLike,
        config: typing.Optional[Config] = None,
    ) -> None:
        """
        Build the per-region evaluators from a raw oil PVT table.

        :param raw: Raw oil PVT table, one table per region
        :param usys: Unit system of the raw table (1 = METRIC, 2 = FIELD, 3 = LAB, 4 = PVT-M)
        :param surface_mass_densities: Oil surface mass density (kg/m³) of every region
        :param config: Build options
        :raises ShapeError: If the raw table is malformed
        """
        self._config = config or Config()
        self._evaluators: typing.Tuple[PVTEvaluator, ...] = tuple(
            create_pvt_function(raw, usys, config=self._config)
        )
        densities = np.array(surface_mass_densities, dtype=np.float64).ravel()
        densities.setflags(write=False)
        self._densities = densities

        if densities.size != len(self._evaluators):
            logger.warning(
                f"Got {densities.size} surface mass densities for "
                f"{len(self._evaluators)} oil PVT regions"
            )

    @classmethod
    def from_init(
        cls,
        intehead: typing.Sequence[int],
        tabdims: typing.Sequence[int],
        tab: typing.Sequence[float],
        config: typing.Optional[Config] = None,
    ) -> typing.Optional[Self]:
        """
        Build from the INTEHEAD, TABDIMS and TAB arrays of a result INIT file.

        :param intehead: Integer header array
        :param tabdims: Table dimensions array
        :param tab: Condensed tables array
        :param config: Build options
        :return: The oil PVT properties, or None if oil is not an active phase
        """
        if not oil_is_active(intehead):
            logger.debug("Oil is not an active phase. No oil PVT tables to build")
            return None

        config = config or Config()
        raw = raw_table_from_init(tabdims, tab)
        usys = unit_system_from_init(intehead)
        densities = surface_mass_density_from_init(
            tabdims, tab, usys, constants=config.constants
        )
        return cls(raw, usys, densities, config=config)

    @property
    def config(self) -> Config:
        """Build options the evaluators were created with."""
        return self._config

    @property
    def num_regions(self) -> int:
        return len(self._evaluators)

    def validate_region(self, region: int) -> None:
        """
        Check that a region index is valid.

        :raises OutOfRangeError: If the index is outside [0, num_regions - 1]
        """
        if region < 0 or region >= len(self._evaluators):
            raise OutOfRangeError(
                f"Region Index {region} Outside Valid Range "
                f"(0 .. {len(self._evaluators) - 1})"
            )

    def formation_volume_factor(
        self, region: int, rs: ArrayLike, po: ArrayLike
    ) -> OneDimensionalGrid:
        """
        Oil formation volume factor in a region.

        :param region: Region index
        :param rs: Dissolved gas-oil ratios (sm³/sm³). Ignored for dead oil.
        :param po: Oil pressures (Pa)
        :return: B (rm³/sm³), one value per point
        """
        self.validate_region(region)
        return self._evaluators[region].formation_volume_factor(rs, po)

    def viscosity(
        self, region: int, rs: ArrayLike, po: ArrayLike
    ) -> OneDimensionalGrid:
        """
        Oil viscosity in a region.

        :param region: Region index
        :param rs: Dissolved gas-oil ratios (sm³/sm³). Ignored for dead oil.
        :param po: Oil pressures (Pa)
        :return: Viscosity (Pa·s), one value per point
        """
        self.validate_region(region)
        return self._evaluators[region].viscosity(rs, po)

    def surface_mass_density(self, region: int) -> float:
        """Oil surface mass density (kg/m³) of a region."""
        self.validate_region(region)
        if region >= self._densities.size:
            raise OutOfRangeError(
                f"No surface mass density for region {region}. "
                f"Densities given for (0 .. {self._densities.size - 1})"
            )
        return float(self._densities[region])

    def get_pvt_curve(self, curve: RawCurve, region: int) -> typing.List[Graph]:
        """
        Tabulated nodes of a property curve in a region, for plotting.

        :param curve: Which curve to extract
        :param region: Region index
        :return: List of (x, y) graphs. Dead oil tables give a single graph.
        """
        self.validate_region(region)
        return self._evaluators[region].get_pvt_curve(curve)

    def copy(self) -> Self:
        """Independent copy of all evaluators and densities."""
        new = object.__new__(type(self))
        new._config = self._config
        new._evaluators = tuple(evaluator.clone() for evaluator in self._evaluators)
        new._densities = self._densities.copy()
        new._densities.setflags(write=False)
        return new

    def __copy__(self) -> Self:
        return self.copy()

    def __deepcopy__(self, memo: typing.Dict[int, typing.Any]) -> Self:
        # `Config` is frozen, so it is shared
        new = self.copy()
        memo[id(self)] = new
        return new

    def __repr__(self) -> str:
        return f"{type(self).__name__}(regions={self.num_regions})"
