"""Command line entry point for unitnet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from unitnet.data import available_datasets
from unitnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "sessions": result.sessions,
        "converged": result.converged,
        "final_loss": result.final_loss,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "network": result.network_path,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-linear",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--dataset",
        choices=list(available_datasets()),
        help="Override the dataset used by the run",
    )
    parser.add_argument("--bits", type=int, help="Input width for logic-gate datasets")
    parser.add_argument("--hidden", type=int, nargs="+", help="Hidden layer sizes")
    parser.add_argument("--mode", choices=["single", "batch"], help="Training mode")
    parser.add_argument("--batch-size", type=int, help="Examples per flush in batch mode")
    parser.add_argument("--learning-rate", type=float, help="Learning rate override")
    parser.add_argument("--momentum", type=float, help="Momentum override")
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and sampling")
    parser.add_argument("--max-sessions", type=int, help="Upper bound on training sessions")
    parser.add_argument("--target-loss", type=float, help="Stop once the evaluation loss is below this")
    parser.add_argument("--load", type=Path, help="Start from a saved network file")
    parser.add_argument("--run-dir", type=Path, help="Directory for metrics and checkpoints")
    parser.add_argument("--enable-plots", action="store_true", help="Write a loss curve PNG")
    parser.add_argument("--list-presets", action="store_true", help="List available presets and exit")
    parser.add_argument("--dump-config", type=Path, help="Dump the resolved config to a JSON file")
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        return yaml.safe_load(text)
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _apply_args(config: dict, args: argparse.Namespace) -> dict:
    data_cfg = config.setdefault("data", {})
    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})

    if args.dataset:
        data_cfg["name"] = args.dataset
    if args.bits is not None:
        data_cfg.setdefault("options", {})["bits"] = int(args.bits)
    if args.hidden:
        model_cfg["hidden"] = list(args.hidden)
    if args.learning_rate is not None:
        model_cfg["learning_rate"] = float(args.learning_rate)
    if args.momentum is not None:
        model_cfg["momentum"] = float(args.momentum)
    if args.load:
        model_cfg["load_path"] = str(args.load)
    if args.mode:
        train_cfg["mode"] = args.mode
    if args.batch_size is not None:
        train_cfg["batch_size"] = int(args.batch_size)
    if args.seed is not None:
        train_cfg["seed"] = int(args.seed)
    if args.max_sessions is not None:
        train_cfg["max_sessions"] = int(args.max_sessions)
    if args.target_loss is not None:
        train_cfg["target_loss"] = float(args.target_loss)
    if args.run_dir:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    config = _apply_args(config, args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item))
    else:
        print(_format_result(result))


if __name__ == "__main__":
    main()
