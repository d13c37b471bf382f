"""Mini-batch gradient descent training loop."""

from __future__ import annotations

import itertools
import math
import warnings
from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, Sequence, Tuple, Union

from ..core.network import MultilayerPerceptron
from ..core.types import ConfigurationError, Dataset, Gradients
from .losses import softmax_cross_entropy
from .metrics import evaluate


@dataclass
class SGDOptimizer:
    """Plain gradient descent: ``param <- param - lr * grad``."""

    lr: float

    def __post_init__(self) -> None:
        if not self.lr > 0:
            raise ConfigurationError(f"Learning rate must be positive, got {self.lr}")

    def step(self, model: MultilayerPerceptron, grads: Gradients) -> None:
        scaled = {name: -self.lr * grad for name, grad in grads.items()}
        model.apply_gradients(scaled)


@dataclass(frozen=True)
class FixedEpochs:
    """Run exactly ``count`` epochs."""

    count: int

    def __post_init__(self) -> None:
        if self.count <= 0:
            raise ConfigurationError(f"Epoch count must be positive, got {self.count}")


@dataclass(frozen=True)
class EarlyStopping:
    """Stop once consecutive validation losses differ by less than ``epsilon``."""

    epsilon: float = 1e-4
    max_epochs: int | None = None

    def __post_init__(self) -> None:
        if not self.epsilon > 0:
            raise ConfigurationError(f"Tolerance must be positive, got {self.epsilon}")
        if self.max_epochs is not None and self.max_epochs <= 0:
            raise ConfigurationError(
                f"max_epochs must be positive when given, got {self.max_epochs}"
            )


Termination = Union[FixedEpochs, EarlyStopping]


@dataclass
class TrainingConfig:
    batch_size: int = 50
    termination: Termination = field(default_factory=EarlyStopping)

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")


@dataclass
class EpochResult:
    epoch: int
    train_loss: float
    val_loss: float | None = None
    val_mistakes: int | None = None
    val_accuracy: float | None = None

    def metrics(self) -> Mapping[str, float]:
        payload = {"train_loss": self.train_loss}
        if self.val_loss is not None:
            payload["val_loss"] = self.val_loss
            payload["val_mistakes"] = float(self.val_mistakes or 0)
            payload["val_accuracy"] = float(self.val_accuracy or 0.0)
        return payload


class Trainer:
    """Drive epochs of forward, softmax, backward and update."""

    def __init__(
        self,
        model: MultilayerPerceptron,
        optimizer: SGDOptimizer,
        config: TrainingConfig | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.model = model
        self.optimizer = optimizer
        self.config = config or TrainingConfig()
        self.callbacks = list(callbacks or [])
        self.history: List[EpochResult] = []
        self.stopped_early_at: int | None = None

    def fit(
        self, train: Dataset, validation: Dataset | None = None
    ) -> List[Tuple[int, float]]:
        """Train in place and return ``(epoch, validation loss)`` pairs.

        The list is empty when no validation dataset is given.
        """

        termination = self.config.termination
        if isinstance(termination, EarlyStopping) and validation is None:
            raise ConfigurationError("Early stopping requires a validation dataset")
        self._check_widths(train, "training")
        if validation is not None:
            self._check_widths(validation, "validation")

        self.history = []
        self.stopped_early_at = None
        losses: List[Tuple[int, float]] = []
        previous: float | None = None
        for epoch in self._epochs(termination):
            result = EpochResult(epoch=epoch, train_loss=self._run_epoch(train))
            if validation is not None:
                report = evaluate(self.model, validation)
                result.val_loss = report.loss
                result.val_mistakes = report.mistakes
                result.val_accuracy = report.accuracy
                losses.append((epoch, report.loss))
            self.history.append(result)
            self._emit_epoch(epoch, result.metrics())

            if isinstance(termination, EarlyStopping):
                current = result.val_loss
                if previous is not None and abs(current - previous) < termination.epsilon:
                    self.stopped_early_at = epoch
                    break
                previous = current
        return losses

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(self, dataset: Dataset) -> float:
        total_loss = 0.0
        total_rows = 0
        for batch in dataset.batches(self.config.batch_size):
            trace = self.model.forward(batch.inputs)
            loss, error = softmax_cross_entropy(trace.output, batch.targets)
            grads = self.model.backward(trace, error)
            self.optimizer.step(self.model, grads)
            rows = batch.inputs.shape[0]
            total_loss += loss * rows
            total_rows += rows
        avg_loss = total_loss / max(total_rows, 1)
        if not math.isfinite(avg_loss):
            warnings.warn(
                f"Training loss is not finite ({avg_loss}); a true class "
                "received zero probability",
                RuntimeWarning,
                stacklevel=3,
            )
        return avg_loss

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)

    def _check_widths(self, dataset: Dataset, split: str) -> None:
        dims = self.model.layer_dims
        if dataset.num_features != dims[0]:
            raise ConfigurationError(
                f"{split} data has {dataset.num_features} features but the "
                f"first layer expects {dims[0]}"
            )
        if dataset.num_classes != dims[-1]:
            raise ConfigurationError(
                f"{split} data has {dataset.num_classes} classes but the "
                f"last layer produces {dims[-1]}"
            )

    @staticmethod
    def _epochs(termination: Termination) -> Iterator[int]:
        if isinstance(termination, FixedEpochs):
            return iter(range(termination.count))
        if termination.max_epochs is not None:
            return iter(range(termination.max_epochs))
        return itertools.count()


__all__ = [
    "EarlyStopping",
    "EpochResult",
    "FixedEpochs",
    "SGDOptimizer",
    "Termination",
    "Trainer",
    "TrainingConfig",
]
