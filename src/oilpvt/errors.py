__all__ = [
    "OilPVTError",
    "ValidationError",
    "ShapeError",
    "UnitSystemError",
    "OutOfRangeError",
    "ComputationError",
    "InvalidEvaluationError",
]


class OilPVTError(Exception):
    """Base class for all oil PVT related errors."""

    pass


class ValidationError(OilPVTError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class ShapeError(ValidationError):
    """Raised when the dimensions of a raw property table are inconsistent."""

    pass


class UnitSystemError(ValidationError):
    """Raised when a unit system identifier is not recognised."""

    pass


class OutOfRangeError(OilPVTError, IndexError):
    """Raised when a region index falls outside the valid range of regions."""

    pass


class ComputationError(OilPVTError):
    """Raised when there is an error during numerical computations."""

    pass


class InvalidEvaluationError(ComputationError):
    """Raised when evaluating an interpolant that has no valid nodes."""

    pass
