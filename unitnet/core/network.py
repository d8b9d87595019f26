"""Fully-connected feed-forward network built from :class:`Unit` nodes.

The network owns every layer and every unit. Units only borrow a reference to
their predecessor layer, which :meth:`Network._wire` refreshes whenever the
layers are rebuilt (initialisation, load, clone).

Two training call sequences are supported:

* single-example: :meth:`Network.train_step` runs forward, backpropagates
  and updates every weight immediately;
* batch-accumulated: :meth:`Network.accumulate_error` sums error signals over
  several examples and :meth:`Network.flush_accumulated_error` applies one
  update averaged over the accumulated example count.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import numpy as np

from . import persistence
from .activations import ActivationKind
from .errors import NotInitializedError, SizeMismatchError
from .types import Topology
from .unit import Unit

Layer = List[Unit]


class Network:
    """Feed-forward network with momentum gradient descent."""

    def __init__(
        self,
        topology: Topology | Sequence[int],
        learning_rate: float = 0.02,
        momentum: float = 0.0,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        hidden_activation: ActivationKind | int | str = ActivationKind.LINEAR,
        output_activation: ActivationKind | int | str = ActivationKind.SIGMOID,
    ) -> None:
        if not isinstance(topology, Topology):
            topology = Topology.from_sizes(topology)
        self.learning_rate = float(learning_rate)
        self.momentum = float(momentum)
        self.pending_examples = 0.0
        self.rng = rng if rng is not None else (np.random.default_rng(seed) if seed is not None else None)
        self._initialized = False

        sizes = topology.layer_sizes
        last = len(sizes) - 1
        self.layers: List[Layer] = []
        for idx, size in enumerate(sizes):
            if idx == 0:
                kind = ActivationKind.IDENTITY
            elif idx == last:
                kind = output_activation
            else:
                kind = hidden_activation
            self.layers.append([Unit(kind) for _ in range(size)])

    def __repr__(self) -> str:
        return (
            f"Network(layer_sizes={self.layer_sizes}, learning_rate={self.learning_rate}, "
            f"momentum={self.momentum})"
        )

    # ------------------------------------------------------------------
    # Structure

    @property
    def layer_sizes(self) -> List[int]:
        return [len(layer) for layer in self.layers]

    @property
    def topology(self) -> Topology:
        return Topology.from_sizes(self.layer_sizes)

    @property
    def input_layer(self) -> Layer:
        return self.layers[0]

    @property
    def output_layer(self) -> Layer:
        return self.layers[-1]

    @property
    def initialized(self) -> bool:
        return self._initialized

    def parameter_count(self) -> int:
        """Number of trainable weights and biases."""

        return int(sum(unit.weights.size + 1 for layer in self.layers[1:] for unit in layer))

    def _wire(self) -> None:
        for idx in range(1, len(self.layers)):
            for unit in self.layers[idx]:
                unit.connect(self.layers[idx - 1])

    def initialize(self) -> None:
        """Wire every layer and draw random weights and biases.

        Must run once before :meth:`forward` unless the network came from
        :meth:`load`, :meth:`from_text` or :meth:`clone`.
        """

        self._wire()
        for layer in self.layers[1:]:
            for unit in layer:
                unit.randomize_parameters(self.rng)
        self.pending_examples = 0.0
        self._initialized = True

    def set_layer_activation(self, layer_index: int, kind: ActivationKind | int | str) -> None:
        """Set the activation of every unit in one layer; nothing is recomputed."""

        kind = ActivationKind.coerce(kind)
        for unit in self.layers[layer_index]:
            unit.activation = kind

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("Network.initialize() must be called before use")

    # ------------------------------------------------------------------
    # Inference

    def set_inputs(self, values: Sequence[float]) -> None:
        values = list(values)
        if len(values) != len(self.input_layer):
            raise SizeMismatchError("inputs", len(self.input_layer), len(values))
        for unit, value in zip(self.input_layer, values):
            unit.value = float(value)

    def forward(self) -> None:
        """Activate every non-input layer in order."""

        self._require_initialized()
        for layer in self.layers[1:]:
            for unit in layer:
                unit.activate()

    def get_outputs(self) -> List[float]:
        return [unit.value for unit in self.output_layer]

    def predict(self, inputs: Sequence[float]) -> List[float]:
        """Convenience wrapper: set inputs, run forward and read the outputs."""

        self.set_inputs(inputs)
        self.forward()
        return self.get_outputs()

    # ------------------------------------------------------------------
    # Training

    def _check_expected(self, expected: Sequence[float]) -> List[float]:
        expected = [float(v) for v in expected]
        if len(expected) != len(self.output_layer):
            raise SizeMismatchError("expected outputs", len(self.output_layer), len(expected))
        return expected

    def _error_signals(self, expected: Sequence[float]) -> List[List[float]]:
        """Per-layer error signals for the current forward pass.

        Index 0 (the input layer) is always empty.
        """

        signals: List[List[float]] = [[] for _ in self.layers]
        signals[-1] = [
            unit.derivative * (unit.value - target)
            for unit, target in zip(self.output_layer, expected)
        ]
        for idx in range(len(self.layers) - 2, 0, -1):
            downstream = self.layers[idx + 1]
            downstream_errors = signals[idx + 1]
            signals[idx] = [
                unit.derivative
                * sum(d.weights[j] * err for d, err in zip(downstream, downstream_errors))
                for j, unit in enumerate(self.layers[idx])
            ]
        return signals

    def _apply_updates(self, scale: float) -> None:
        # Output first, so every layer reads pre-update predecessor values.
        for idx in range(len(self.layers) - 1, 0, -1):
            predecessor = self.layers[idx - 1]
            for unit in self.layers[idx]:
                unit.apply_update(predecessor, self.learning_rate, self.momentum, scale)

    def train_step(self, inputs: Sequence[float], expected: Sequence[float]) -> List[float]:
        """Backpropagate a single example and update every weight.

        Returns the outputs of the forward pass that produced the update.
        """

        expected = self._check_expected(expected)
        self.set_inputs(inputs)
        self.forward()
        outputs = self.get_outputs()

        signals = self._error_signals(expected)
        for layer, errors in zip(self.layers[1:], signals[1:]):
            for unit, error in zip(layer, errors):
                unit.error = error
        self._apply_updates(scale=1.0)
        return outputs

    def accumulate_error(self, inputs: Sequence[float], expected: Sequence[float]) -> List[float]:
        """Add one example's error signals without touching the weights."""

        expected = self._check_expected(expected)
        self.set_inputs(inputs)
        self.forward()
        outputs = self.get_outputs()

        signals = self._error_signals(expected)
        for layer, errors in zip(self.layers[1:], signals[1:]):
            for unit, error in zip(layer, errors):
                unit.error += error
        self.pending_examples += 1.0
        return outputs

    def flush_accumulated_error(self) -> None:
        """Apply one update averaged over the accumulated examples."""

        self._require_initialized()
        scale = self.pending_examples if self.pending_examples != 0 else 1.0
        self._apply_updates(scale=scale)
        for layer in self.layers[1:]:
            for unit in layer:
                unit.error = 0.0
        self.pending_examples = 0.0

    # ------------------------------------------------------------------
    # Copying

    @classmethod
    def clone(cls, source: "Network") -> "Network":
        """Return an independent deep copy of ``source``, ready to use."""

        source._require_initialized()
        copy = cls(
            source.layer_sizes,
            learning_rate=source.learning_rate,
            momentum=source.momentum,
            rng=source.rng.spawn(1)[0] if source.rng is not None else None,
        )
        for target_layer, source_layer in zip(copy.layers, source.layers):
            for target, unit in zip(target_layer, source_layer):
                target.copy_from(unit)
        copy.pending_examples = source.pending_examples
        copy._wire()
        copy._initialized = True
        return copy

    def copy_parameters_from(self, source: "Network") -> None:
        """Overwrite weights and biases in place from an identically shaped network."""

        if len(source.layers) != len(self.layers):
            raise SizeMismatchError("layers", len(self.layers), len(source.layers))
        for idx, (mine, theirs) in enumerate(zip(self.layers, source.layers)):
            if len(mine) != len(theirs):
                raise SizeMismatchError(f"layer {idx}", len(mine), len(theirs))
            for target, unit in zip(mine, theirs):
                if idx > 0 and unit.weights.shape != target.weights.shape:
                    raise SizeMismatchError(f"layer {idx} weights", target.weights.size, unit.weights.size)

        for target_layer, source_layer in zip(self.layers[1:], source.layers[1:]):
            for target, unit in zip(target_layer, source_layer):
                target.weights = unit.weights.copy()
                target.bias = unit.bias

    # ------------------------------------------------------------------
    # Persistence

    def _replace_layers(self, layers: List[Layer]) -> None:
        self.layers = layers
        self._wire()
        for layer in self.layers[1:]:
            for unit in layer:
                unit.reset_state()
        self.pending_examples = 0.0
        self._initialized = True

    def to_text(self) -> str:
        return persistence.format_network(self)

    def load_text(self, text: str) -> None:
        """Replace every layer and unit with the ones described by ``text``."""

        self._replace_layers(persistence.parse_layers(text))

    def save(self, path: str | Path) -> str:
        return persistence.save(self, path)

    def load(self, path: str | Path) -> None:
        """Replace this network with the one stored at ``path``."""

        self._replace_layers(persistence.read_layers(path))

    @classmethod
    def from_text(
        cls,
        text: str,
        learning_rate: float = 0.02,
        momentum: float = 0.0,
        *,
        seed: int | None = None,
    ) -> "Network":
        layers = persistence.parse_layers(text)
        network = cls([len(layer) for layer in layers], learning_rate, momentum, seed=seed)
        network._replace_layers(layers)
        return network

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        learning_rate: float = 0.02,
        momentum: float = 0.0,
        *,
        seed: int | None = None,
    ) -> "Network":
        return cls.from_text(Path(path).read_text(encoding="utf-8"), learning_rate, momentum, seed=seed)


__all__ = ["Layer", "Network"]
