"""Activation functions for unitnet units."""

from __future__ import annotations

from enum import IntEnum

from .errors import UnknownActivationError


class ActivationKind(IntEnum):
    """Activation selector; the integer values are the persisted codes."""

    LINEAR = 1
    SIGMOID = 2
    IDENTITY = 3

    @classmethod
    def coerce(cls, kind: "ActivationKind | int | str") -> "ActivationKind":
        """Return ``kind`` as an :class:`ActivationKind`.

        Accepts members, their integer codes and their (case-insensitive)
        names, so configs can say either ``2`` or ``"sigmoid"``.
        """

        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str) and not kind.strip().lstrip("-").isdigit():
            try:
                return cls[kind.strip().upper()]
            except KeyError as exc:
                raise UnknownActivationError(f"Unknown activation: {kind!r}") from exc
        try:
            return cls(int(kind))
        except (TypeError, ValueError) as exc:
            raise UnknownActivationError(f"Unknown activation: {kind!r}") from exc


def linear(x: float) -> float:
    """Rectified linear activation, clipped at zero."""

    return max(0.0, x)


def linear_derivative(value: float) -> float:
    return 1.0 if value > 0.0 else 0.0


def sigmoid(x: float) -> float:
    """Fast sigmoid approximation with range ``(0, 1)``."""

    return 0.5 * (x / (1.0 + abs(x))) + 0.5


def sigmoid_derivative(value: float) -> float:
    shifted = 1.0 + abs(value)
    return 1.0 / (2.0 * shifted * shifted)


def apply(kind: ActivationKind, x: float) -> float:
    """Evaluate the activation selected by ``kind`` at ``x``."""

    if kind is ActivationKind.LINEAR:
        return linear(x)
    if kind is ActivationKind.SIGMOID:
        return sigmoid(x)
    if kind is ActivationKind.IDENTITY:
        return x
    raise UnknownActivationError(f"Unknown activation: {kind!r}")


def derivative(kind: ActivationKind, value: float) -> float:
    """Derivative of ``kind`` evaluated at the post-activation ``value``."""

    if kind is ActivationKind.LINEAR:
        return linear_derivative(value)
    if kind is ActivationKind.SIGMOID:
        return sigmoid_derivative(value)
    if kind is ActivationKind.IDENTITY:
        return 1.0
    raise UnknownActivationError(f"Unknown activation: {kind!r}")


__all__ = [
    "ActivationKind",
    "apply",
    "derivative",
    "linear",
    "linear_derivative",
    "sigmoid",
    "sigmoid_derivative",
]
