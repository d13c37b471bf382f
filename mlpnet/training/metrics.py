"""Forward-only evaluation of a trained network."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..core.network import MultilayerPerceptron
from ..core.types import Array, Dataset
from .losses import cross_entropy


@dataclass(frozen=True)
class EvaluationReport:
    samples: int
    mistakes: int
    loss: float

    @property
    def accuracy(self) -> float:
        if self.samples == 0:
            return 0.0
        return 1.0 - self.mistakes / self.samples


def count_mistakes(predictions: Array, targets: Array) -> int:
    """Count rows whose argmax differs between ``predictions`` and ``targets``."""

    pred_idx = np.argmax(predictions, axis=1)
    targ_idx = np.argmax(targets, axis=1)
    return int(np.sum(pred_idx != targ_idx))


def evaluate(model: MultilayerPerceptron, dataset: Dataset) -> EvaluationReport:
    probs = model.predict_proba(dataset.features)
    return EvaluationReport(
        samples=dataset.num_samples,
        mistakes=count_mistakes(probs, dataset.targets),
        loss=cross_entropy(probs, dataset.targets),
    )


__all__ = ["EvaluationReport", "count_mistakes", "evaluate"]
