"""Exception hierarchy for unitnet."""

from __future__ import annotations


class UnitNetError(Exception):
    """Base class for every error raised by the core."""


class SizeMismatchError(UnitNetError, ValueError):
    """A vector does not match the size of the layer it is meant for."""

    def __init__(self, what: str, expected: int, got: int) -> None:
        super().__init__(f"{what}: expected {expected} values, got {got}")
        self.expected = expected
        self.got = got


class UnknownActivationError(UnitNetError, ValueError):
    """An activation lookup was given something that is not an ActivationKind."""


class ParseError(UnitNetError, ValueError):
    """Persisted network text could not be parsed."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class NotInitializedError(UnitNetError, RuntimeError):
    """The network was used before ``initialize()``, ``load`` or ``clone``."""


__all__ = [
    "UnitNetError",
    "SizeMismatchError",
    "UnknownActivationError",
    "ParseError",
    "NotInitializedError",
]
