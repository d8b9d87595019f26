"""Core numerical primitives for unitnet."""

from . import activations, errors, persistence, types
from .activations import ActivationKind
from .network import Network
from .unit import Unit

__all__ = [
    "ActivationKind",
    "Network",
    "Unit",
    "activations",
    "errors",
    "persistence",
    "types",
]
