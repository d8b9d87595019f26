import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_basic_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor-linear", "--max-sessions", "2", "--target-loss", "0"])
    run_dir = Path("runs/xor-linear")
    assert (run_dir / "metrics_eval.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "network.txt").exists()

    result = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert result["sessions"] == 2
    assert result["converged"] is False


def test_cli_overrides_and_dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"session_length": 5}}))
    main(
        [
            "--preset",
            "xor-batch",
            "--config",
            str(override),
            "--dataset",
            "or",
            "--bits",
            "3",
            "--hidden",
            "3",
            "2",
            "--learning-rate",
            "0.1",
            "--max-sessions",
            "1",
            "--run-dir",
            "out",
            "--dump-config",
            "resolved.json",
        ]
    )
    resolved = json.loads(Path("resolved.json").read_text())
    assert resolved["data"] == {"name": "or", "options": {"bits": 3}}
    assert resolved["model"]["hidden"] == [3, 2]
    assert resolved["model"]["learning_rate"] == 0.1
    assert resolved["train"]["session_length"] == 5
    assert resolved["train"]["mode"] == "batch"
    manifest = json.loads(Path("out/manifest.json").read_text())
    assert manifest["network"]["layer_sizes"] == [3, 3, 2, 1]


def test_cli_yaml_config(tmp_path, monkeypatch):
    yaml = pytest.importorskip("yaml")
    monkeypatch.chdir(tmp_path)
    config = {
        "data": {"name": "and", "options": {"bits": 2}},
        "model": {"hidden": [2], "learning_rate": 0.1},
        "train": {"max_sessions": 1, "session_length": 4, "run_dir": "yaml-run"},
    }
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(config))
    main(["--config", str(path), "--seed", "4"])
    manifest = json.loads(Path("yaml-run/manifest.json").read_text())
    assert manifest["config"]["data"]["name"] == "and"
    assert manifest["config"]["train"]["seed"] == 4


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--list-presets"])
    assert info.value.code == 0
    names = capsys.readouterr().out.split()
    assert "xor-linear" in names
    assert "or-3bit" in names
