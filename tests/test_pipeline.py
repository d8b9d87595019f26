from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import numpy as np
import pytest

from unitnet import Network
from unitnet.training import pipelines


def _small_config(run_dir: Path, **train) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset("xor-linear")))
    config["train"].update({"max_sessions": 3, "session_length": 10, "target_loss": None})
    config["train"].update(train)
    config["train"]["run_dir"] = str(run_dir)
    return config


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"xor-linear", "xor-batch", "and-relu", "xor-sweep", "or-3bit"} <= names
    assert pipelines.load_preset("or-3bit")["data"]["options"]["bits"] == 3


def test_load_preset_returns_copies():
    first = pipelines.load_preset("xor-linear")
    first["model"]["hidden"].append(99)
    assert pipelines.load_preset("xor-linear")["model"]["hidden"] == [4]


def test_unknown_preset():
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")


def test_pipeline_smoke(tmp_path):
    config = _small_config(tmp_path / "run")
    result = pipelines.run_pipeline(config)
    assert not isinstance(result, list)
    assert result.sessions == 3
    assert result.steps == 30
    assert not result.converged

    run_dir = tmp_path / "run"
    for name in (
        "metrics_train.jsonl",
        "metrics_train.csv",
        "metrics_eval.jsonl",
        "metrics_eval.csv",
        "manifest.json",
        "summary.json",
        "config.json",
        "network.txt",
        "best.txt",
        "last.txt",
    ):
        assert (run_dir / name).exists(), name

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["session"] for r in records] == [1, 2, 3]
    assert all(r["split"] == "eval" for r in records)
    assert records[-1]["loss"] == pytest.approx(result.final_loss)

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 0
    assert manifest["dataset"]["gate"] == "xor"
    assert manifest["network"]["layer_sizes"] == [2, 4, 1]

    saved = Network.from_file(result.network_path)
    assert saved.layer_sizes == [2, 4, 1]


def test_pipeline_batch_mode(tmp_path):
    config = _small_config(tmp_path / "batch", mode="batch", batch_size=3)
    result = pipelines.run_pipeline(config)
    assert result.sessions == 3


def test_pipeline_starts_from_saved_network(tmp_path):
    seed_net = Network((2, 4, 1), seed=21, hidden_activation="sigmoid")
    seed_net.initialize()
    path = seed_net.save(tmp_path / "start.txt")

    config = _small_config(tmp_path / "resume", max_sessions=1)
    config["model"]["load_path"] = path
    result = pipelines.run_pipeline(config)
    assert Path(result.network_path).read_text() != Path(path).read_text()

    config["data"]["options"]["bits"] = 3
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)


def test_build_network_checks_dimensions():
    with pytest.raises(ValueError):
        pipelines.build_network({"inputs": 3, "hidden": [2]}, 2, 1, seed=0)
    network = pipelines.build_network({"hidden": [5, 2], "hidden_activation": 2}, 3, 2, seed=0)
    assert network.layer_sizes == [3, 5, 2, 2]
    assert network.initialized


def test_sweep_runs_every_combination(tmp_path):
    config = json.loads(json.dumps(pipelines.load_preset("xor-sweep")))
    config["sweep"] = {"learning_rates": [0.3], "momenta": [0.0, 0.5], "seeds": [0]}
    config["train"].update({"max_sessions": 2, "session_length": 5, "run_dir": str(tmp_path / "sweep")})
    results = pipelines.run_pipeline(config)
    assert isinstance(results, list)
    assert len(results) == 2
    run_dirs = {Path(r.metrics_path).parent.name for r in results}
    assert run_dirs == {"lr0.3_m0.0_s0", "lr0.3_m0.5_s0"}


def test_metrics_determinism(tmp_path):
    first = pipelines.run_pipeline(_small_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_small_config(tmp_path / "b"))
    values_first = [json.loads(line)["loss"] for line in Path(first.metrics_path).read_text().splitlines()]
    values_second = [json.loads(line)["loss"] for line in Path(second.metrics_path).read_text().splitlines()]
    assert np.allclose(values_first, values_second, atol=1e-12)
