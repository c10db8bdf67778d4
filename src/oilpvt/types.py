import enum
import typing

import numpy as np
from typing_extensions import TypeAlias


__all__ = [
    "OneDimension",
    "OneDimensionalGrid",
    "FloatOrArray",
    "ArrayLike",
    "Converter",
    "Graph",
    "RawCurve",
]

OneDimension: TypeAlias = typing.Tuple[int]
"""1D index"""

OneDimensionalGrid = np.ndarray[OneDimension, np.dtype[np.floating]]
"""1D array of floats, used for table nodes, query inputs and evaluated properties"""

FloatOrArray = typing.Union[float, np.typing.NDArray[np.floating]]

ArrayLike = typing.Union[typing.Sequence[float], np.typing.NDArray[np.floating]]
"""Any one-dimensional sequence of floats accepted at the query surface."""

Converter = typing.Callable[[FloatOrArray], FloatOrArray]
"""Scalar (or element-wise) conversion from a table's unit system to SI."""

Graph: TypeAlias = typing.Tuple[OneDimensionalGrid, OneDimensionalGrid]
"""A diagnostic curve as a pair of (x, y) node arrays."""


class RawCurve(enum.Enum):
    """Kinds of diagnostic curves that can be extracted from a PVT table."""

    FVF = "fvf"
    """Formation volume factor as a function of pressure."""
    VISCOSITY = "viscosity"
    """Viscosity as a function of pressure."""
    SATURATED_STATE = "saturated_state"
    """Saturated state curve, (pressure, dissolved gas-oil ratio) at the bubble point."""
