"""Run artifact helpers: manifests and JSON side files."""

from __future__ import annotations

import json
import platform
import subprocess
import time
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np


def git_sha() -> str:
    """Commit of the working tree, or ``"unknown"`` outside a git checkout."""

    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return out.decode().strip()


def write_json(path: str | Path, payload: Mapping[str, object]) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # default=str keeps enums and paths from config overrides serialisable.
    path.write_text(json.dumps(payload, indent=2, default=str))
    return str(path)


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    layer_sizes: Sequence[int] = (),
    parameter_count: int | None = None,
) -> str:
    """Record what a run was built from next to its metrics."""

    network = {"layer_sizes": [int(size) for size in layer_sizes]}
    if parameter_count is not None:
        network["parameters"] = int(parameter_count)
    manifest = {
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "network": network,
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    return write_json(path, manifest)


__all__ = ["git_sha", "write_json", "write_manifest"]
