from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np


__all__ = [
    "get_dtype",
    "set_dtype",
    "with_precision",
    "use_64bit_precision",
    "use_32bit_precision",
]

_oilpvt_dtype: ContextVar[np.typing.DTypeLike] = ContextVar(
    "_oilpvt_dtype", default=np.float64
)


def get_dtype() -> np.typing.DTypeLike:
    """
    Get the floating point data type used for table nodes and evaluated properties.

    :return: The current data type.
    """
    return _oilpvt_dtype.get()


def set_dtype(dtype: np.typing.DTypeLike) -> None:
    """
    Set the floating point data type for the current context.

    Only tables built after this call are affected. Existing interpolants keep
    the precision they were built with.

    :param dtype: The data type to set as default.
    """
    _oilpvt_dtype.set(dtype)


@contextmanager
def with_precision(dtype: np.typing.DTypeLike):
    """
    Context manager to temporarily set the data type used when building tables.

    :param dtype: The data type to set within the context.
    """
    token = _oilpvt_dtype.set(dtype)
    try:
        yield
    finally:
        _oilpvt_dtype.reset(token)


def use_64bit_precision() -> None:
    """
    Set the default data type to float64.

    Default precision for oilpvt.
    """
    set_dtype(np.float64)


def use_32bit_precision() -> None:
    """Set the default data type to float32."""
    set_dtype(np.float32)
