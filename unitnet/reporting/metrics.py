"""Per-session metric sinks used as trainer loggers."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, Mapping

from .artifacts import git_sha


class _SessionSink:
    """Truncate ``path`` on creation and append one row per session."""

    def __init__(self, path: str | Path, *, split: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.rows = 0

    def _row(self, session: int, metrics: Mapping[str, float]) -> Dict[str, object]:
        row: Dict[str, object] = {"session": int(session), "split": self.split}
        for key, value in metrics.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                row[key] = float(value)
        return row

    def _append(self, row: Dict[str, object]) -> None:
        raise NotImplementedError

    def on_epoch(self, session: int, metrics: Mapping[str, float]) -> None:
        self._append(self._row(session, metrics))
        self.rows += 1

    def __call__(self, session: int, metrics: Mapping[str, float]) -> None:
        self.on_epoch(session, metrics)


class JsonlSink(_SessionSink):
    """JSON-lines writer; each record also carries the run seed and git sha."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed
        self.sha = sha or git_sha()

    def _row(self, session: int, metrics: Mapping[str, float]) -> Dict[str, object]:
        row = {"session": int(session), "split": self.split, "seed": self.seed, "sha": self.sha}
        row.update(super()._row(session, metrics))
        return row

    def _append(self, row: Dict[str, object]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(row) + "\n")


class CsvSink(_SessionSink):
    """CSV writer whose header is fixed by the first session's metrics."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split=split)
        self.fieldnames: list[str] | None = None

    def _append(self, row: Dict[str, object]) -> None:
        if self.fieldnames is None:
            self.fieldnames = sorted(row)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fieldnames, extrasaction="ignore")
            if self.rows == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["CsvSink", "JsonlSink"]
