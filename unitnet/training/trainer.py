"""Session-based training loops for unitnet networks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Example, RunResult
from ..data.registry import DatasetSpec
from .losses import REGISTRY as LOSS_REGISTRY
from .losses import Loss
from .metrics import compute_metrics, default_metrics

logger = logging.getLogger(__name__)

MODES = ("single", "batch")


def evaluate(
    network: Network,
    examples: Sequence[Example],
    *,
    loss: Loss | str = "mse",
    metric_names: Sequence[str] = (),
    task_type: str = "regression",
) -> Mapping[str, float]:
    """Score ``network`` on a fixed table of examples without training it."""

    loss_fn = LOSS_REGISTRY.resolve(loss) if isinstance(loss, str) else loss
    predictions = np.array([network.predict(example.inputs) for example in examples])
    targets = np.array([example.targets for example in examples], dtype=np.float64)
    metrics = {"loss": loss_fn(predictions, targets)}
    metrics.update(compute_metrics(metric_names, predictions, targets, task_type=task_type))
    return metrics


class Trainer:
    """Train a :class:`Network` on randomly drawn examples, one session at a time.

    A session draws ``session_length`` examples. In ``"single"`` mode each
    example triggers :meth:`Network.train_step`; in ``"batch"`` mode errors
    are accumulated and flushed every ``batch_size`` examples (and at the end
    of the session). After every session the network is scored on the full
    example table and training stops once that loss drops below
    ``target_loss``.
    """

    def __init__(
        self,
        network: Network,
        *,
        mode: str = "single",
        batch_size: int = 4,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.network = network
        self.mode = mode
        self.batch_size = int(batch_size)
        self.callbacks = list(callbacks or [])

    def run(
        self,
        dataset: DatasetSpec,
        *,
        session_length: int = 50,
        max_sessions: int = 1000,
        target_loss: float | None = 0.05,
        seed: int | None = None,
        loss: str = "auto",
        metric_names: Sequence[str] | str = (),
        eval_every: int = 1,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
        checkpoint_dir: str | Path | None = None,
    ) -> RunResult:
        spec = dataset.data_spec
        sizes = self.network.layer_sizes
        if spec.d_in != sizes[0] or spec.d_out != sizes[-1]:
            raise ValueError(
                f"Dataset {dataset.name!r} is {spec.d_in}->{spec.d_out} "
                f"but the network is {sizes[0]}->{sizes[-1]}"
            )

        if isinstance(metric_names, str):
            if metric_names == "default" or metric_names.strip() == "":
                metric_names = default_metrics(spec.task_type)
            else:
                metric_names = [m.strip() for m in metric_names.split(",") if m.strip()]
        if not metric_names:
            metric_names = default_metrics(spec.task_type)

        loss_fn = LOSS_REGISTRY.resolve(loss)
        rng = np.random.default_rng(seed)
        if not self.network.initialized:
            self.network.initialize()

        split_loggers = split_loggers or {}
        checkpoint_path = Path(checkpoint_dir) if checkpoint_dir is not None else None
        if checkpoint_path is not None:
            checkpoint_path.mkdir(parents=True, exist_ok=True)

        best_loss = float("inf")
        current_loss = float("inf")
        converged = False
        total_steps = 0
        sessions = 0

        for session in range(1, max_sessions + 1):
            sessions = session
            train_metrics = self._run_session(
                dataset, rng, session_length, loss_fn, metric_names, spec.task_type
            )
            total_steps += session_length
            self._emit("train", session, train_metrics, split_loggers)

            should_eval = session % max(1, eval_every) == 0 or session == max_sessions
            if should_eval:
                eval_metrics = evaluate(
                    self.network,
                    dataset.examples,
                    loss=loss_fn,
                    metric_names=metric_names,
                    task_type=spec.task_type,
                )
                self._emit("eval", session, eval_metrics, split_loggers)
                current_loss = float(eval_metrics["loss"])
            else:
                current_loss = float(train_metrics["loss"])

            if current_loss < best_loss - 1e-12:
                best_loss = current_loss
                if checkpoint_path is not None:
                    self.network.save(checkpoint_path / "best.txt")

            if should_eval and target_loss is not None and current_loss < target_loss:
                converged = True
                logger.info(
                    "Reached loss %.6f < %.6f after %d sessions (%d examples)",
                    current_loss,
                    target_loss,
                    session,
                    total_steps,
                )
                break

        if checkpoint_path is not None:
            self.network.save(checkpoint_path / "last.txt")
        return RunResult(
            steps=total_steps,
            sessions=sessions,
            converged=converged,
            final_loss=current_loss,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_session(
        self,
        dataset: DatasetSpec,
        rng: np.random.Generator,
        length: int,
        loss_fn: Loss,
        metric_names: Sequence[str],
        task_type: str,
    ) -> Mapping[str, float]:
        predictions: list[list[float]] = []
        targets: list[Sequence[float]] = []
        for example in dataset.stream(rng, max(1, length)):
            if self.mode == "single":
                outputs = self.network.train_step(example.inputs, example.targets)
            else:
                outputs = self.network.accumulate_error(example.inputs, example.targets)
                if self.network.pending_examples >= self.batch_size:
                    self.network.flush_accumulated_error()
            predictions.append(outputs)
            targets.append(example.targets)
        if self.network.pending_examples:
            self.network.flush_accumulated_error()

        preds = np.asarray(predictions, dtype=np.float64)
        targs = np.asarray(targets, dtype=np.float64)
        metrics = {"loss": loss_fn(preds, targs)}
        metrics.update(compute_metrics(metric_names, preds, targs, task_type=task_type))
        return metrics

    def _emit(
        self,
        split: str,
        session: int,
        metrics: Mapping[str, float],
        loggers: Mapping[str, Sequence[object]],
    ) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(session, metrics)  # type: ignore[attr-defined]
        for callback in loggers.get(split, []):
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(session, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(session, metrics)


__all__ = ["MODES", "Trainer", "evaluate"]
