import logging
import typing

import attrs
import numpy as np

from oilpvt.errors import ComputationError, InvalidEvaluationError, ValidationError
from oilpvt.tables.interpolation import LinearInterpolant
from oilpvt.types import ArrayLike, Graph, OneDimensionalGrid, RawCurve
from oilpvt.units import ConvertUnits

logger = logging.getLogger(__name__)

__all__ = ["DeadOilTable", "LiveOilTable"]

# Result columns of an oil PVT interpolant
RECIPROCAL_FVF = 0
"""1/B"""
RECIPROCAL_FVF_VISCOSITY = 1
"""1/(B*mu)"""


def _as_query(values: ArrayLike, name: str) -> OneDimensionalGrid:
    query = np.atleast_1d(np.asarray(values, dtype=np.float64))
    if not np.all(np.isfinite(query)):
        raise ValidationError(
            f"Non-finite {name} in query: {query[~np.isfinite(query)]}"
        )
    return query


def _formation_volume_factor(reciprocal_fvf: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        fvf = 1.0 / reciprocal_fvf
    if not np.all(np.isfinite(fvf)):
        raise ComputationError(
            "Non-finite formation volume factor. Interpolated 1/B is zero"
        )
    return fvf


def _viscosity(
    reciprocal_fvf: np.ndarray, reciprocal_fvf_viscosity: np.ndarray
) -> np.ndarray:
    # mu = (1/B) / (1/(B*mu))
    with np.errstate(divide="ignore", invalid="ignore"):
        viscosity = reciprocal_fvf / reciprocal_fvf_viscosity
    if not np.all(np.isfinite(viscosity)):
        raise ComputationError(
            "Non-finite viscosity. Interpolated 1/(B*mu) is zero"
        )
    return viscosity


@attrs.frozen
class DeadOilTable:
    """
    Oil properties as functions of pressure only.

    Wraps a `LinearInterpolant` of the columns [1/B, 1/(B*mu)] over oil pressure,
    with all values in SI.
    """

    interpolant: LinearInterpolant
    warn_on_extrapolation: bool = False

    @classmethod
    def from_columns(
        cls,
        pressures: OneDimensionalGrid,
        columns: typing.Sequence[OneDimensionalGrid],
        convert: ConvertUnits,
        sentinel_threshold: float = 1.0e20,
        allow_empty: bool = False,
        warn_on_extrapolation: bool = False,
    ) -> "DeadOilTable":
        """
        Build a table from one sub-table of a raw table.

        :param pressures: Oil pressure column, in table units
        :param columns: [1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo], in table units
        :param convert: Unit converters for the sub-table
        :param sentinel_threshold: Magnitude marking unused rows
        :param allow_empty: Build an invalid table if no rows are valid
        :param warn_on_extrapolation: Log a warning for queries outside the pressure nodes
        """
        interpolant = LinearInterpolant.from_columns(
            x=pressures,
            columns=columns,
            convert_x=convert.independent,
            convert_columns=convert.column,
            sentinel_threshold=sentinel_threshold,
            allow_empty=allow_empty,
        )
        return cls(interpolant=interpolant, warn_on_extrapolation=warn_on_extrapolation)

    @property
    def is_valid(self) -> bool:
        return self.interpolant.is_valid

    def evaluate(self, pressures: ArrayLike, column: int) -> OneDimensionalGrid:
        """Evaluate one of the reciprocal columns at the given pressures."""
        po = _as_query(pressures, "pressure")
        if self.warn_on_extrapolation and self.interpolant.is_extrapolating(po):
            nodes = self.interpolant.x
            logger.warning(
                f"Pressure extrapolation: queried P ∈ [{po.min():.4g}, {po.max():.4g}] Pa, "
                f"table range [{nodes[0]:.4g}, {nodes[-1]:.4g}] Pa"
            )
        return self.interpolant.evaluate(po, column)

    def formation_volume_factor(self, pressures: ArrayLike) -> OneDimensionalGrid:
        """
        Oil formation volume factor at the given pressures.

        :param pressures: Oil pressures (Pa)
        :return: B (rm³/sm³), one value per pressure
        """
        return _formation_volume_factor(self.evaluate(pressures, RECIPROCAL_FVF))

    def viscosity(self, pressures: ArrayLike) -> OneDimensionalGrid:
        """
        Oil viscosity at the given pressures.

        :param pressures: Oil pressures (Pa)
        :return: Viscosity (Pa·s), one value per pressure
        """
        reciprocal_fvf = self.evaluate(pressures, RECIPROCAL_FVF)
        reciprocal_fvf_viscosity = self.evaluate(pressures, RECIPROCAL_FVF_VISCOSITY)
        return _viscosity(reciprocal_fvf, reciprocal_fvf_viscosity)

    def get_pvt_curve(self, curve: RawCurve) -> Graph:
        """
        Tabulated nodes of a property curve, for plotting.

        There is no saturated state in a table without dissolved gas, so the
        saturated state curve is empty.
        """
        if curve == RawCurve.SATURATED_STATE or not self.is_valid:
            return np.empty(0), np.empty(0)

        pressures = self.interpolant.independent_variable().copy()
        reciprocal_fvf = self.interpolant.result_variable(RECIPROCAL_FVF)
        if curve == RawCurve.FVF:
            return pressures, _formation_volume_factor(reciprocal_fvf)

        reciprocal_fvf_viscosity = self.interpolant.result_variable(
            RECIPROCAL_FVF_VISCOSITY
        )
        return pressures, _viscosity(reciprocal_fvf, reciprocal_fvf_viscosity)

    def clone(self) -> "DeadOilTable":
        return attrs.evolve(self, interpolant=self.interpolant.clone())


def _readonly_key(value: typing.Any) -> np.ndarray:
    array = np.array(value, dtype=np.float64).ravel()
    array.setflags(write=False)
    return array


@attrs.frozen(eq=False)
class LiveOilTable:
    """
    Oil properties as functions of dissolved gas-oil ratio (Rs) and pressure.

    Each Rs node owns a pressure sub-table in the dead oil format. For a query
    (Rs, Po), the two sub-tables bracketing Rs are evaluated at Po and their
    reciprocal columns (1/B, 1/(B*mu)) are blended linearly in Rs. Queries outside
    the Rs node range use the boundary sub-table alone.
    """

    key: OneDimensionalGrid = attrs.field(converter=_readonly_key)
    """Dissolved gas-oil ratio nodes (sm³/sm³), ascending."""
    subtables: typing.Tuple[DeadOilTable, ...] = attrs.field(converter=tuple)
    """Pressure sub-tables, one per `key` node."""

    def __attrs_post_init__(self) -> None:
        if self.key.size != len(self.subtables):
            raise ValidationError(
                f"Number of Rs nodes ({self.key.size}) must match "
                f"number of sub-tables ({len(self.subtables)})"
            )
        if not np.all(np.diff(self.key) > 0):
            raise ValidationError(
                "Rs nodes must be strictly monotonically increasing"
            )

    def _locate(
        self, rs: OneDimensionalGrid
    ) -> typing.Tuple[np.ndarray, np.ndarray]:
        """
        Find the left bracketing node of each Rs and the blending weight of the right one.

        Weights are clamped to [0, 1], so queries outside the node range get the
        boundary sub-table only.
        """
        key = self.key
        left = np.searchsorted(key, rs, side="right") - 1
        left = np.clip(left, 0, key.size - 2)
        with np.errstate(invalid="ignore"):
            weight = (rs - key[left]) / (key[left + 1] - key[left])
        return left, np.clip(weight, 0.0, 1.0)

    def evaluate(
        self, rs: ArrayLike, pressures: ArrayLike, column: int
    ) -> OneDimensionalGrid:
        """
        Evaluate one of the reciprocal columns at parallel (Rs, Po) points.

        :raises ValidationError: If `rs` and `pressures` differ in length or are not finite
        :raises InvalidEvaluationError: If a contributing sub-table has no valid nodes
        """
        rs = _as_query(rs, "dissolved gas-oil ratio")
        po = _as_query(pressures, "pressure")
        if rs.shape != po.shape:
            raise ValidationError(
                f"Incompatible shapes: dissolved gas {rs.shape}, pressure {po.shape}"
            )

        if self.key.size == 0:
            raise InvalidEvaluationError(
                "Cannot evaluate a live oil table without Rs nodes"
            )
        if self.key.size == 1:
            return self._evaluate_subtable(0, po, column)

        result = np.zeros(po.shape, dtype=np.float64)
        if po.size == 0:
            return result

        left, weight = self._locate(rs)
        for nodes, node_weight in ((left, 1.0 - weight), (left + 1, weight)):
            active = node_weight > 0.0
            for index in np.unique(nodes[active]):
                mask = active & (nodes == index)
                result[mask] += node_weight[mask] * self._evaluate_subtable(
                    int(index), po[mask], column
                )
        return result

    def _evaluate_subtable(
        self, index: int, pressures: OneDimensionalGrid, column: int
    ) -> OneDimensionalGrid:
        subtable = self.subtables[index]
        if not subtable.is_valid:
            raise InvalidEvaluationError(
                f"Sub-table at Rs = {self.key[index]} has no valid pressure nodes"
            )
        return subtable.evaluate(pressures, column)

    def formation_volume_factor(
        self, rs: ArrayLike, pressures: ArrayLike
    ) -> OneDimensionalGrid:
        """Oil formation volume factor at parallel (Rs, Po) points."""
        return _formation_volume_factor(self.evaluate(rs, pressures, RECIPROCAL_FVF))

    def viscosity(self, rs: ArrayLike, pressures: ArrayLike) -> OneDimensionalGrid:
        """Oil viscosity at parallel (Rs, Po) points."""
        reciprocal_fvf = self.evaluate(rs, pressures, RECIPROCAL_FVF)
        reciprocal_fvf_viscosity = self.evaluate(rs, pressures, RECIPROCAL_FVF_VISCOSITY)
        return _viscosity(reciprocal_fvf, reciprocal_fvf_viscosity)

    def get_pvt_curve(self, curve: RawCurve) -> typing.List[Graph]:
        """
        Tabulated nodes of a property curve, for plotting.

        The saturated state curve is a single graph of (Rs, Po) with the first
        pressure node of every sub-table as the saturation pressure. FVF and
        viscosity curves are one graph of (Po, property) per sub-table.
        Sub-tables without valid nodes are left out.
        """
        valid = [
            (rs, subtable)
            for rs, subtable in zip(self.key, self.subtables)
            if subtable.is_valid
        ]
        if curve == RawCurve.SATURATED_STATE:
            rs = np.array([rs for rs, _ in valid], dtype=np.float64)
            pressures = np.array(
                [subtable.interpolant.x[0] for _, subtable in valid], dtype=np.float64
            )
            return [(rs, pressures)]

        return [subtable.get_pvt_curve(curve) for _, subtable in valid]

    def clone(self) -> "LiveOilTable":
        return LiveOilTable(
            key=self.key.copy(),
            subtables=tuple(subtable.clone() for subtable in self.subtables),
        )
