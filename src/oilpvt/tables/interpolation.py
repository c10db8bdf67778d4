import typing

import attrs
import numpy as np

from oilpvt._precision import get_dtype, with_precision
from oilpvt.errors import InvalidEvaluationError, ValidationError
from oilpvt.types import Converter, OneDimensionalGrid

__all__ = ["LinearInterpolant"]


def _readonly(value: typing.Any) -> np.ndarray:
    array = np.array(value, dtype=get_dtype())
    array.setflags(write=False)
    return array


def _identity(value):
    return value


@attrs.frozen(eq=False)
class LinearInterpolant:
    """
    Piecewise linear interpolant of one or more result columns over an ascending
    independent variable.

    Outside the node range, results are extrapolated linearly using the supplied
    derivative columns as the slopes at the first and last nodes. The derivatives
    are taken as given, not re-derived from the nodes.

    An interpolant without nodes is "invalid". It can be built (see `invalid`) but
    any attempt to evaluate it raises `InvalidEvaluationError`.
    """

    x: OneDimensionalGrid = attrs.field(converter=_readonly)
    """Independent variable nodes, strictly ascending. Shape (n,)."""
    values: np.ndarray = attrs.field(converter=_readonly)
    """Result columns at the nodes. Shape (n, m)."""
    derivatives: np.ndarray = attrs.field(converter=_readonly)
    """Derivatives of the result columns with respect to `x`. Shape (n, m)."""

    def __attrs_post_init__(self) -> None:
        if self.x.ndim != 1:
            raise ValidationError("Interpolant nodes must be 1-dimensional")
        if self.values.ndim != 2 or self.values.shape[0] != self.x.size:
            raise ValidationError(
                f"Result columns shape {self.values.shape} does not match {self.x.size} nodes"
            )
        if self.derivatives.shape != self.values.shape:
            raise ValidationError(
                f"Derivative columns shape {self.derivatives.shape} must match "
                f"result columns shape {self.values.shape}"
            )
        if not np.all(np.diff(self.x) > 0):
            raise ValidationError(
                "Interpolant nodes must be strictly monotonically increasing"
            )

    @classmethod
    def invalid(cls, num_columns: int = 2) -> "LinearInterpolant":
        """Build an interpolant with no nodes. Evaluating it always fails."""
        return cls(
            x=np.empty(0),
            values=np.empty((0, num_columns)),
            derivatives=np.empty((0, num_columns)),
        )

    @classmethod
    def from_columns(
        cls,
        x: OneDimensionalGrid,
        columns: typing.Sequence[OneDimensionalGrid],
        convert_x: Converter = _identity,
        convert_columns: typing.Optional[typing.Sequence[Converter]] = None,
        sentinel_threshold: float = 1.0e20,
        allow_empty: bool = False,
    ) -> "LinearInterpolant":
        """
        Build an interpolant from raw table columns.

        The first half of `columns` are result columns, the second half their
        derivatives, in the same order. Rows whose independent variable is a
        sentinel (magnitude >= `sentinel_threshold`) are dropped. Remaining values
        are converted with `convert_x` and `convert_columns`.

        :param x: Independent variable column
        :param columns: Result columns followed by derivative columns
        :param convert_x: Converter applied to the independent variable
        :param convert_columns: One converter per entry of `columns`
        :param sentinel_threshold: Magnitude marking unused rows
        :param allow_empty: Return an invalid interpolant instead of raising when
            no valid rows remain
        :return: A new `LinearInterpolant`
        :raises ValidationError: If the columns are inconsistent, or no valid rows
            remain and `allow_empty` is False
        """
        if len(columns) == 0 or len(columns) % 2 != 0:
            raise ValidationError(
                f"Expected result and derivative columns in pairs, got {len(columns)} columns"
            )
        if convert_columns is None:
            convert_columns = [_identity] * len(columns)
        if len(convert_columns) != len(columns):
            raise ValidationError(
                f"Expected {len(columns)} column converters, got {len(convert_columns)}"
            )

        x = np.asarray(x, dtype=np.float64)
        valid = np.abs(x) < sentinel_threshold
        num_results = len(columns) // 2
        if not np.any(valid):
            if allow_empty:
                return cls.invalid(num_columns=num_results)
            raise ValidationError("No valid nodes in table")

        table = np.column_stack(
            [
                convert(np.asarray(column, dtype=np.float64)[valid])
                for column, convert in zip(columns, convert_columns)
            ]
        )
        return cls(
            x=convert_x(x[valid]),
            values=table[:, :num_results],
            derivatives=table[:, num_results:],
        )

    @property
    def is_valid(self) -> bool:
        return self.x.size > 0

    @property
    def num_columns(self) -> int:
        return self.values.shape[1]

    def independent_variable(self) -> OneDimensionalGrid:
        """Independent variable nodes."""
        return self.x

    def result_variable(self, column: int) -> OneDimensionalGrid:
        """Node values of a result column."""
        return self.values[:, column]

    def is_extrapolating(self, x: OneDimensionalGrid) -> bool:
        """Whether any of `x` lies outside the node range."""
        if not self.is_valid or x.size == 0:
            return False
        return bool(np.any(x < self.x[0]) or np.any(x > self.x[-1]))

    def evaluate(
        self, x: typing.Union[float, OneDimensionalGrid], column: int
    ) -> OneDimensionalGrid:
        """
        Evaluate a result column at `x`.

        :param x: Query point(s) of the independent variable
        :param column: Index of the result column
        :return: Interpolated (or extrapolated) values, one per query point
        :raises InvalidEvaluationError: If the interpolant has no nodes
        """
        if not self.is_valid:
            raise InvalidEvaluationError("Cannot evaluate an interpolant without nodes")

        query = np.atleast_1d(np.asarray(x, dtype=self.x.dtype))
        nodes = self.x
        y = self.values[:, column]
        result = np.interp(query, nodes, y)

        below = query < nodes[0]
        if np.any(below):
            slope = self.derivatives[0, column]
            result[below] = y[0] + slope * (query[below] - nodes[0])

        above = query > nodes[-1]
        if np.any(above):
            slope = self.derivatives[-1, column]
            result[above] = y[-1] + slope * (query[above] - nodes[-1])
        return result

    def clone(self) -> "LinearInterpolant":
        """Independent copy with its own node storage, in the precision it was built with."""
        with with_precision(self.x.dtype):
            return LinearInterpolant(
                x=self.x.copy(),
                values=self.values.copy(),
                derivatives=self.derivatives.copy(),
            )
