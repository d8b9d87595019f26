"""Core typing contracts for unitnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Example:
    """A single training example."""

    inputs: Sequence[float]
    targets: Sequence[float]


@dataclass(frozen=True)
class Topology:
    """Description of the fully-connected network architecture."""

    inputs: int
    outputs: int
    hidden: Sequence[int] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hidden", tuple(int(h) for h in self.hidden))
        for size in self.layer_sizes:
            if size < 1:
                raise ValueError(f"Every layer needs at least one unit, got {self.layer_sizes}")

    @property
    def layer_sizes(self) -> List[int]:
        return [int(self.inputs), *self.hidden, int(self.outputs)]

    @classmethod
    def from_sizes(cls, sizes: Sequence[int]) -> "Topology":
        sizes = [int(s) for s in sizes]
        if len(sizes) < 2:
            raise ValueError(f"A network needs an input and an output layer, got {sizes}")
        return cls(inputs=sizes[0], outputs=sizes[-1], hidden=tuple(sizes[1:-1]))


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`unitnet.training.trainer.Trainer.run`."""

    steps: int
    sessions: int
    converged: bool
    final_loss: float
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""
    network_path: str = ""
