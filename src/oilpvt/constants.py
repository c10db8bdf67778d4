"""Unit conversion factors and table conventions"""

from contextvars import ContextVar
import typing

import attrs


__all__ = ["Constant", "Constants", "c", "ConstantsContext", "get_constant"]


@attrs.frozen(slots=True)
class Constant:
    """
    A constant value with optional description and unit.
    """

    value: typing.Any
    """The actual value of the constant."""

    description: typing.Optional[str] = None
    """Optional description of what this constant represents."""

    unit: typing.Optional[str] = None
    """Optional unit of measurement for this constant."""

    def __str__(self) -> str:
        return f"{self.value}{self.unit or ''}"


DEFAULT_CONSTANTS: typing.Dict[str, typing.Union[typing.Any, Constant]] = {
    # Table conventions
    "SENTINEL_THRESHOLD": Constant(
        value=1.0e20,
        description="Magnitude at or above which a table entry marks an unused slot",
    ),
    "PVT_OIL_COLUMNS": Constant(
        value=5,
        description="Columns of an oil PVT table: [Po, 1/B, 1/(B*mu), d(1/B)/dPo, d(1/(B*mu))/dPo]",
    ),
    # Pressure
    "BAR": Constant(value=1.0e5, description="One bar", unit="Pa"),
    "PSIA": Constant(
        value=6894.757293168361, description="One pound-force per square inch", unit="Pa"
    ),
    "ATM": Constant(value=101325.0, description="One standard atmosphere", unit="Pa"),
    # Viscosity
    "CENTI_POISE": Constant(value=1.0e-3, description="One centipoise", unit="Pa·s"),
    # Volume
    "CUBIC_METRE": Constant(value=1.0, description="One cubic metre", unit="m³"),
    "CUBIC_CENTIMETRE": Constant(
        value=1.0e-6, description="One cubic centimetre", unit="m³"
    ),
    "CUBIC_FOOT": Constant(value=0.028316846592, description="One cubic foot", unit="m³"),
    "STB": Constant(
        value=0.158987294928, description="One (stock tank) oil barrel", unit="m³"
    ),
    "MSCF": Constant(
        value=1000.0 * 0.028316846592,
        description="One thousand standard cubic feet",
        unit="m³",
    ),
    # Mass
    "KILOGRAM": Constant(value=1.0, description="One kilogram", unit="kg"),
    "GRAM": Constant(value=1.0e-3, description="One gram", unit="kg"),
    "POUND": Constant(value=0.45359237, description="One pound mass", unit="kg"),
}


class Constants:
    """
    Conversion factors and table conventions.

    Constants are kept in an internal store and read with dot notation (plain value)
    or bracket notation (the `Constant` object with metadata).
    """

    __slots__ = ("_store",)

    def __init__(
        self,
        overrides: typing.Optional[
            typing.Mapping[str, typing.Union[typing.Any, Constant]]
        ] = None,
    ) -> None:
        """
        Initialize the store with the defaults, optionally overridden.

        :param overrides: Mapping of constant names to raw values or `Constant` objects
        """
        store: typing.Dict[str, Constant] = {}
        for name, value in {**DEFAULT_CONSTANTS, **(overrides or {})}.items():
            store[name] = value if isinstance(value, Constant) else Constant(value=value)
        object.__setattr__(self, "_store", store)

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("_"):
            return object.__getattribute__(self, name)
        try:
            return self._store[name].value
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            ) from None

    def __getitem__(self, name: str) -> Constant:
        return self._store[name]

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(constants={len(self._store)})"

    def get(self, name: str, default: typing.Any = None) -> typing.Any:
        """Get a constant's value with a default fallback.

        :param name: Name of the constant
        :param default: Default value if constant doesn't exist
        :return: Value of the constant or default
        """
        constant = self._store.get(name)
        if constant is None:
            return default
        return constant.value

    def get_constant(
        self, name: str, default: typing.Optional[Constant] = None
    ) -> typing.Optional[Constant]:
        """Get a `Constant` object with a default fallback."""
        return self._store.get(name, default)

    def __call__(self) -> "ConstantsContext":
        """
        Create a context manager that, within its context, makes this instance
        the one read through the global proxy `oilpvt.c`.
        """
        return ConstantsContext(self)


_constants_context: ContextVar[Constants] = ContextVar(
    "constants_context", default=Constants()
)


class ConstantsContext:
    """
    Context manager for temporary global `Constants` overrides.

    Upon exiting the context, the previous `Constants` instance is restored.
    """

    def __init__(self, constants: Constants) -> None:
        self._new_constants = constants
        self._token = None

    def __enter__(self) -> Constants:
        self._token = _constants_context.set(self._new_constants)
        return self._new_constants

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._token is not None:
            _constants_context.reset(self._token)


class _ConstantsProxy:
    """Proxy to the current context's `Constants` instance."""

    @property
    def _constants(self) -> Constants:
        return _constants_context.get()

    def __getattr__(self, name: str) -> typing.Any:
        return getattr(self._constants, name)

    def __getitem__(self, name: str) -> Constant:
        return self._constants[name]


c = _ConstantsProxy()
"""Global proxy to access conversion factors and table conventions."""


def get_constant(name: str) -> typing.Optional[Constant]:
    """Get a `Constant` object by name from the global constants.

    :param name: Name of the constant
    :return: `Constant` object or None if not found
    """
    return c._constants.get_constant(name)
