"""unitnet public API."""

from .core import activations  # noqa: F401
from .core import persistence  # noqa: F401
from .core.activations import ActivationKind
from .core.errors import (
    NotInitializedError,
    ParseError,
    SizeMismatchError,
    UnitNetError,
    UnknownActivationError,
)
from .core.network import Network
from .core.types import Example, RunResult, Topology
from .core.unit import Unit
from .data import available_datasets, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, evaluate

__all__ = [
    "ActivationKind",
    "Example",
    "Network",
    "NotInitializedError",
    "ParseError",
    "RunResult",
    "SizeMismatchError",
    "Topology",
    "Trainer",
    "Unit",
    "UnitNetError",
    "UnknownActivationError",
    "activations",
    "available_datasets",
    "evaluate",
    "get_dataset",
    "load_preset",
    "persistence",
    "presets",
    "run_pipeline",
]
