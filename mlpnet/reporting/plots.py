"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


class PlotAdapter:
    """Collect per-epoch losses and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._train: List[Tuple[int, float]] = []
        self._val: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def plot_path(self) -> Path:
        return self.run_dir / "loss.png"

    def on_epoch(self, epoch: int, metrics):
        if not self.enable_plots:
            return
        self._train.append((epoch, float(metrics.get("train_loss", 0.0))))
        if "val_loss" in metrics:
            self._val.append((epoch, float(metrics["val_loss"])))

    def close(self) -> None:
        if not self.enable_plots or not self._train:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        epochs, losses = zip(*self._train)
        ax.plot(epochs, losses, label="train")
        if self._val:
            epochs, losses = zip(*self._val)
            ax.plot(epochs, losses, label="validation")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Cross-entropy (bits)")
        ax.set_title("Training Curve")
        ax.legend()
        fig.savefig(self.plot_path)
        plt.close(fig)

    __call__ = on_epoch
