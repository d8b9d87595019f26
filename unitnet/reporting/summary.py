"""Deterministic summaries of per-session metrics files.

The summary only depends on the JSONL records, so two runs with the same
seed produce byte-identical ``summary.json`` files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

# Bookkeeping fields written by JsonlSink that are not metrics.
_NON_METRIC_KEYS = {"session", "seed", "split", "sha"}


def compute_auc(points: Sequence[float]) -> float:
    """Area under ``points`` along an implicit session axis."""

    if not points:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.trapezoid(y, np.arange(len(points), dtype=np.float64)))


def read_records(path: str | Path) -> List[Mapping[str, object]]:
    """Load a JSONL metrics file; a missing file reads as no records."""

    path = Path(path)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def metric_series(records: Sequence[Mapping[str, object]]) -> Dict[str, List[float]]:
    series: Dict[str, List[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _NON_METRIC_KEYS or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                series.setdefault(key, []).append(float(value))
    return series


def best_session(records: Sequence[Mapping[str, object]], key: str = "loss") -> Mapping[str, float] | None:
    """Session with the lowest ``key``; the earliest one wins ties."""

    best = None
    for record in records:
        if key not in record:
            continue
        value = float(record[key])  # type: ignore[arg-type]
        if best is None or value < best["value"]:
            best = {"session": int(record.get("session", 0)), "value": value}  # type: ignore[arg-type]
    return best


def first_session_below(
    records: Sequence[Mapping[str, object]], threshold: float, key: str = "loss"
) -> int | None:
    for record in records:
        if key in record and float(record[key]) < threshold:  # type: ignore[arg-type]
            return int(record.get("session", 0))  # type: ignore[arg-type]
    return None


def summarise(
    records: Sequence[Mapping[str, object]],
    *,
    tail: int = 32,
    target_loss: float | None = None,
) -> Mapping[str, object]:
    tail_window = min(tail, len(records)) if records else 0
    metrics: Dict[str, Mapping[str, float]] = {}
    for name, values in metric_series(records).items():
        arr = np.asarray(values, dtype=np.float64)
        window = arr[-tail_window:] if tail_window else arr[:0]
        metrics[name] = {
            "min": float(arr.min()),
            "max": float(arr.max()),
            "mean": float(arr.mean()),
            "last": float(arr[-1]),
            "tail_auc": compute_auc(window.tolist()),
        }

    summary: Dict[str, object] = {
        "version": 1,
        "records": len(records),
        "sessions": int(records[-1].get("session", len(records))) if records else 0,  # type: ignore[arg-type]
        "tail_window": tail_window,
        "metrics": metrics,
        "best": best_session(records),
    }
    if target_loss is not None:
        summary["target"] = {
            "loss": float(target_loss),
            "first_session": first_session_below(records, float(target_loss)),
        }
    return summary


def write_summary(
    metrics_jsonl: str | Path,
    out_summary_json: str | Path,
    *,
    tail: int = 32,
    target_loss: float | None = None,
) -> str:
    """Summarise a JSONL metrics file into ``out_summary_json``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = summarise(read_records(metrics_jsonl), tail=tail, target_loss=target_loss)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = [
    "best_session",
    "compute_auc",
    "first_session_below",
    "metric_series",
    "read_records",
    "summarise",
    "write_summary",
]
