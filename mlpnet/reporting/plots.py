"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect per-epoch validation metrics and optionally plot them."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "accuracy" not in metrics:
            return
        cost = float(metrics.get("cost", float("nan")))
        self._history.append((epoch, float(metrics["accuracy"]), cost))

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, accuracy, cost = zip(*self._history)
        fig, (ax_acc, ax_cost) = plt.subplots(1, 2, figsize=(9, 3.5))
        ax_acc.plot(epochs, accuracy, marker="o")
        ax_acc.set_xlabel("Epoch")
        ax_acc.set_ylabel("Accuracy")
        ax_acc.set_ylim(0.0, 1.0)
        ax_cost.plot(epochs, cost, marker="o", color="tab:red")
        ax_cost.set_xlabel("Epoch")
        ax_cost.set_ylabel("Mean cost")
        fig.suptitle("Validation")
        fig.tight_layout()
        plot_path = self.run_dir / "validation.png"
        fig.savefig(plot_path)
        plt.close(fig)

    __call__ = on_epoch
