"""Loss-curve plotting that is safe on headless machines."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect the per-session loss and render it once the run ends.

    Does nothing unless ``enable_plots`` is set, so matplotlib is only
    imported by runs that ask for a figure.
    """

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        target_loss: float | None = None,
        filename: str = "loss.png",
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.target_loss = target_loss
        self.filename = filename
        self.history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, session: int, metrics: Mapping[str, float]) -> None:
        if self.enable_plots and "loss" in metrics:
            self.history.append((int(session), float(metrics["loss"])))

    def close(self) -> str | None:
        """Write the figure and return its path, or ``None`` if nothing was drawn."""

        if not self.enable_plots or not self.history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        sessions, losses = zip(*self.history)
        fig, ax = plt.subplots()
        ax.plot(sessions, losses, label="loss")
        if self.target_loss is not None and self.target_loss > 0:
            ax.axhline(self.target_loss, linestyle="--", color="grey", label="target")
        ax.set_xlabel("Session")
        ax.set_ylabel("Loss")
        if min(losses) > 0:
            ax.set_yscale("log")
        ax.legend()
        plot_path = self.run_dir / self.filename
        fig.savefig(plot_path)
        plt.close(fig)
        return str(plot_path)


__all__ = ["PlotAdapter"]
