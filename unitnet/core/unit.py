"""A single computational node of a unitnet network."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from . import activations
from .activations import ActivationKind
from .types import Array

WEIGHT_RANGE = (-1.0, 1.0)


class Unit:
    """Neuron-equivalent node with weighted inputs, a bias and an activation.

    ``predecessor`` is a borrowed reference to the previous layer of the
    owning :class:`~unitnet.core.network.Network`. Units never create or copy
    layers themselves; the network rewires the reference whenever it rebuilds
    its layers.
    """

    def __init__(
        self,
        activation: ActivationKind | int | str = ActivationKind.IDENTITY,
        weights: Sequence[float] | Array | None = None,
        bias: float = 0.0,
    ) -> None:
        self.activation = ActivationKind.coerce(activation)
        self.weights: Array = np.asarray(weights if weights is not None else [], dtype=np.float64)
        self.bias = float(bias)
        self.value = 0.0
        self.error = 0.0
        self.derivative = 0.0
        self.prev_weight_delta: Array = np.zeros_like(self.weights)
        self.prev_bias_delta = 0.0
        self.predecessor: Sequence[Unit] = ()

    def __repr__(self) -> str:
        return (
            f"Unit(activation={self.activation.name}, n_weights={self.weights.size}, "
            f"bias={self.bias:.4g}, value={self.value:.4g})"
        )

    # ------------------------------------------------------------------
    # Wiring

    def connect(self, predecessor: Sequence[Unit]) -> None:
        """Point this unit at ``predecessor`` without taking ownership."""

        self.predecessor = predecessor
        if self.weights.size != len(predecessor):
            self.weights = np.zeros(len(predecessor), dtype=np.float64)
        if self.prev_weight_delta.shape != self.weights.shape:
            self.prev_weight_delta = np.zeros_like(self.weights)

    def reset_state(self) -> None:
        """Zero the gradient scratch state and the momentum memory."""

        self.error = 0.0
        self.derivative = 0.0
        self.prev_bias_delta = 0.0
        self.prev_weight_delta = np.zeros_like(self.weights)

    def randomize_parameters(self, rng: np.random.Generator | None = None) -> None:
        """Draw weights and bias uniformly from ``[-1, 1)`` and reset state."""

        rng = rng if rng is not None else np.random.default_rng()
        low, high = WEIGHT_RANGE
        self.weights = rng.uniform(low, high, size=len(self.predecessor)).astype(np.float64)
        self.bias = float(rng.uniform(low, high))
        self.reset_state()

    # ------------------------------------------------------------------
    # Computation

    def input_values(self, layer: Sequence[Unit] | None = None) -> Array:
        layer = self.predecessor if layer is None else layer
        return np.fromiter((unit.value for unit in layer), dtype=np.float64, count=len(layer))

    def activate(self) -> float:
        """Recompute ``value`` and ``derivative`` from the predecessor layer."""

        total = self.bias + float(np.dot(self.input_values(), self.weights))
        self.value = activations.apply(self.activation, total)
        # Evaluated on the activated value, not on ``total``.
        self.derivative = activations.derivative(self.activation, self.value)
        return self.value

    def apply_update(
        self,
        input_layer: Sequence[Unit],
        learning_rate: float,
        momentum: float,
        scale: float = 1.0,
    ) -> None:
        """Momentum gradient-descent step using the accumulated ``error``.

        ``scale`` is 1.0 for single-example updates and the number of
        accumulated examples for batch updates.
        """

        inputs = self.input_values(input_layer)
        deltas = learning_rate * self.error * inputs / scale + momentum * self.prev_weight_delta
        self.weights = self.weights - deltas
        self.prev_weight_delta = deltas

        bias_delta = learning_rate * self.error / scale + momentum * self.prev_bias_delta
        self.bias -= bias_delta
        self.prev_bias_delta = bias_delta

    # ------------------------------------------------------------------
    # Copying

    def copy_from(self, other: Unit) -> None:
        """Copy parameters and scratch state from ``other`` (wiring excluded)."""

        self.activation = other.activation
        self.weights = other.weights.copy()
        self.bias = other.bias
        self.value = other.value
        self.error = other.error
        self.derivative = other.derivative
        self.prev_weight_delta = other.prev_weight_delta.copy()
        self.prev_bias_delta = other.prev_bias_delta


__all__ = ["Unit", "WEIGHT_RANGE"]
