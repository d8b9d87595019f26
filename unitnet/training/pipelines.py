"""Pipeline assembly: config mapping -> dataset, network, trainer, artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from ..core.activations import ActivationKind
from ..core.network import Network
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_json, write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-linear": {
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {
            "hidden": [4],
            "hidden_activation": "linear",
            "output_activation": "sigmoid",
            "learning_rate": 0.1,
            "momentum": 0.5,
        },
        "train": {
            "mode": "single",
            "session_length": 50,
            "max_sessions": 2000,
            "target_loss": 0.05,
            "seed": 0,
            "run_dir": "runs/xor-linear",
            "enable_plots": False,
        },
    },
    "xor-batch": {
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {
            "hidden": [4],
            "hidden_activation": "linear",
            "output_activation": "sigmoid",
            "learning_rate": 0.1,
            "momentum": 0.5,
        },
        "train": {
            "mode": "batch",
            "batch_size": 4,
            "session_length": 64,
            "max_sessions": 4000,
            "target_loss": 0.05,
            "seed": 1,
            "run_dir": "runs/xor-batch",
            "enable_plots": False,
        },
    },
    "and-relu": {
        "data": {"name": "and", "options": {"bits": 2}},
        "model": {
            "hidden": [4],
            "hidden_activation": "linear",
            "output_activation": "sigmoid",
            "learning_rate": 0.02,
            "momentum": 0.0,
        },
        "train": {
            "mode": "single",
            "session_length": 50,
            "max_sessions": 2000,
            "target_loss": 0.05,
            "seed": 7,
            "run_dir": "runs/and-relu",
            "enable_plots": False,
        },
    },
    "xor-sweep": {
        "sweep": {
            "learning_rates": [0.05, 0.1],
            "momenta": [0.0, 0.5],
            "seeds": [0, 1],
        },
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {
            "hidden": [4],
            "hidden_activation": "linear",
            "output_activation": "sigmoid",
        },
        "train": {
            "mode": "single",
            "session_length": 50,
            "max_sessions": 2000,
            "target_loss": 0.05,
            "run_dir": "runs/xor-sweep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load preset files in YAML format") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config)
    return _train_single(config)


def _run_sweep(config: Mapping[str, object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    model_cfg = config.get("model", {})
    train_cfg = config.get("train", {})
    base_dir = Path(str(train_cfg.get("run_dir", "runs/sweep")))
    results: List[RunResult] = []
    for lr in sweep_cfg.get("learning_rates", [model_cfg.get("learning_rate", 0.02)]):
        for momentum in sweep_cfg.get("momenta", [model_cfg.get("momentum", 0.0)]):
            for seed in sweep_cfg.get("seeds", [train_cfg.get("seed", 0)]):
                cfg = deepcopy(dict(config))
                cfg.pop("sweep", None)
                cfg.setdefault("model", {}).update({"learning_rate": lr, "momentum": momentum})
                cfg.setdefault("train", {})["seed"] = seed
                cfg["train"]["run_dir"] = str(base_dir / f"lr{lr}_m{momentum}_s{seed}")
                results.append(_train_single(cfg))
    return results


def build_network(
    model_cfg: Mapping[str, object],
    d_in: int,
    d_out: int,
    seed: int | None,
) -> Network:
    """Build (or load) the network described by ``model_cfg``."""

    learning_rate = float(model_cfg.get("learning_rate", 0.02))
    momentum = float(model_cfg.get("momentum", 0.0))
    load_path = model_cfg.get("load_path")
    if load_path:
        network = Network.from_file(str(load_path), learning_rate, momentum, seed=seed)
        sizes = network.layer_sizes
        if sizes[0] != d_in or sizes[-1] != d_out:
            raise ValueError(
                f"Loaded network {sizes} does not fit a {d_in}->{d_out} dataset"
            )
        return network

    d_in_cfg = int(model_cfg.get("inputs", d_in))
    d_out_cfg = int(model_cfg.get("outputs", d_out))
    if d_in_cfg != d_in:
        raise ValueError(f"Configured inputs={d_in_cfg} but the dataset has {d_in}")
    if d_out_cfg != d_out:
        raise ValueError(f"Configured outputs={d_out_cfg} but the dataset has {d_out}")

    network = Network(
        [d_in, *[int(h) for h in model_cfg.get("hidden", [])], d_out],
        learning_rate=learning_rate,
        momentum=momentum,
        seed=seed,
        hidden_activation=model_cfg.get("hidden_activation", ActivationKind.LINEAR),
        output_activation=model_cfg.get("output_activation", ActivationKind.SIGMOID),
    )
    network.initialize()
    return network


def _train_single(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = registry.get_dataset(data_cfg["name"], **data_cfg.get("options", {}))
    data_spec = dataset.data_spec
    seed = int(train_cfg.get("seed", 0))
    network = build_network(model_cfg, data_spec.d_in, data_spec.d_out, seed)

    mode = str(train_cfg.get("mode", "single"))
    loss_name = str(train_cfg.get("loss", "auto"))
    metrics_cfg = train_cfg.get("metrics", "default")
    metrics_list = metrics_cfg if isinstance(metrics_cfg, str) else ",".join(str(m) for m in metrics_cfg)
    target_loss = train_cfg.get("target_loss", 0.05)
    target_loss = float(target_loss) if target_loss is not None else None

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        network=network,
        mode=mode,
        loss=loss_name,
        metrics=metrics_list,
    )

    train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
    train_csv = CsvSink(run_dir / "metrics_train.csv", split="train")
    eval_jsonl = JsonlSink(run_dir / "metrics_eval.jsonl", split="eval", seed=seed)
    eval_csv = CsvSink(run_dir / "metrics_eval.csv", split="eval")
    plots = PlotAdapter(
        run_dir,
        enable_plots=bool(train_cfg.get("enable_plots", False)),
        target_loss=target_loss,
    )

    trainer = Trainer(
        network,
        mode=mode,
        batch_size=int(train_cfg.get("batch_size", 4)),
    )
    result = trainer.run(
        dataset,
        session_length=int(train_cfg.get("session_length", 50)),
        max_sessions=int(train_cfg.get("max_sessions", 1000)),
        target_loss=target_loss,
        seed=seed,
        loss=loss_name,
        metric_names=metrics_list,
        eval_every=int(train_cfg.get("eval_every", 1)),
        split_loggers={
            "train": [train_jsonl, train_csv],
            "eval": [eval_jsonl, eval_csv, plots],
        },
        checkpoint_dir=run_dir,
    )
    plots.close()

    network_path = network.save(run_dir / "network.txt")
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=_safe_config(config),
        dataset_provenance=dataset.provenance,
        layer_sizes=network.layer_sizes,
        parameter_count=network.parameter_count(),
    )
    summary_path = write_summary(
        eval_jsonl.path,
        run_dir / "summary.json",
        tail=int(train_cfg.get("summary_tail", 32)),
        target_loss=target_loss,
    )
    write_json(run_dir / "config.json", config)

    return RunResult(
        steps=result.steps,
        sessions=result.sessions,
        converged=result.converged,
        final_loss=result.final_loss,
        metrics_path=str(eval_jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        network_path=network_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object]) -> Mapping[str, object]:
    return json.loads(json.dumps(config, default=str))


def _activation_names(network: Network) -> Sequence[str]:
    return [layer[0].activation.name.lower() for layer in network.layers]


def _print_startup_summary(
    *,
    dataset_name: str,
    network: Network,
    mode: str,
    loss: str,
    metrics: str | Iterable[str],
) -> None:
    print("=== unitnet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Layers        : {network.layer_sizes}")
    print(f"Activations   : {_activation_names(network)}")
    print(f"Mode          : {mode}")
    print(f"Learning rate : {network.learning_rate}")
    print(f"Momentum      : {network.momentum}")
    print(f"Loss          : {loss}")
    print(f"Metrics       : {metrics}")
    print(f"Parameters    : {network.parameter_count()}")
    print("===================")


__all__ = ["build_network", "load_preset", "presets", "run_pipeline"]
