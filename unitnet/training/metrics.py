"""Metric helpers for the trainer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics(task_type: str) -> List[str]:
    if task_type == "regression":
        return ["mae", "rmse"]
    if task_type == "binary":
        return ["accuracy", "mae"]
    raise ValueError(f"Unknown task type: {task_type}")


def compute_metric(name: str, predictions: Array, targets: Array, *, task_type: str) -> MetricResult:
    key = name.lower()
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(targets, dtype=np.float64)
    if key == "mae":
        value = float(np.mean(np.abs(preds - targs)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean((preds - targs) ** 2)))
    elif key == "accuracy":
        if task_type != "binary":
            raise ValueError("accuracy is only defined for binary tasks")
        # Outputs come from bounded activations, so threshold them directly.
        pred_idx = (preds >= 0.5).astype(int)
        targ_idx = (targs >= 0.5).astype(int)
        value = float(np.mean(np.all(pred_idx == targ_idx, axis=-1)))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str],
    predictions: Array,
    targets: Array,
    *,
    task_type: str,
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets, task_type=task_type)
        results[metric.name] = metric.value
    return results


__all__ = ["MetricResult", "compute_metric", "compute_metrics", "default_metrics"]
