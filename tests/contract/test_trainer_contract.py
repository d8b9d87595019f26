import json
from pathlib import Path

from unitnet.training import pipelines


def test_trainer_pipeline_produces_artifacts(tmp_path):
    config = {
        "data": {
            "name": "table",
            "options": {
                "inputs": [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]],
                "targets": [[0.1], [0.4], [0.6], [0.9]],
            },
        },
        "model": {
            "hidden": [3],
            "hidden_activation": "linear",
            "output_activation": "identity",
            "learning_rate": 0.05,
            "momentum": 0.0,
        },
        "train": {
            "mode": "single",
            "session_length": 8,
            "max_sessions": 4,
            "target_loss": None,
            "seed": 11,
            "run_dir": str(tmp_path / "run"),
            "enable_plots": False,
        },
    }

    result = pipelines.run_pipeline(config)
    assert Path(result.metrics_path).exists()
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"] == {"type": "table", "rows": 4}

    metrics = [
        json.loads(line)
        for line in Path(result.metrics_path).read_text().splitlines()
        if line
    ]
    assert metrics, "metrics should not be empty"
    first = metrics[0]
    assert first["split"] == "eval"
    assert "sha" in first
    assert first["seed"] == 11
    assert all({"loss", "mae", "rmse"} <= set(entry) for entry in metrics)

    train_records = (tmp_path / "run" / "metrics_train.jsonl").read_text().splitlines()
    assert len(train_records) == 4
    assert (tmp_path / "run" / "metrics_eval.csv").exists()


def test_written_config_matches_input(tmp_path):
    config = json.loads(json.dumps(pipelines.load_preset("and-relu")))
    config["train"].update({"max_sessions": 1, "run_dir": str(tmp_path / "run")})
    pipelines.run_pipeline(config)
    assert json.loads((tmp_path / "run" / "config.json").read_text()) == config
