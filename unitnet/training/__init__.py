"""Training loops, losses, metrics and pipeline presets."""

from .pipelines import build_network, load_preset, presets, run_pipeline
from .trainer import Trainer, evaluate

__all__ = ["Trainer", "build_network", "evaluate", "load_preset", "presets", "run_pipeline"]
