"""Cross-entropy loss over softmax outputs."""

from __future__ import annotations

import numpy as np

from ..core.activations import softmax
from ..core.types import Array


def cross_entropy(predictions: Array, targets: Array) -> float:
    """Mean over rows of ``-sum(target * log2(prediction))``.

    Classes with zero target weight contribute nothing, so a prediction that
    equals its one-hot target scores exactly 0. A zero probability on a
    class with non-zero target weight yields ``inf``.
    """

    predictions = np.asarray(predictions, dtype=np.float64)
    targets = np.asarray(targets, dtype=np.float64)
    logs = np.zeros_like(predictions)
    np.log2(predictions, out=logs, where=targets != 0)
    per_row = -(targets * logs).sum(axis=1)
    return float(per_row.mean())


def softmax_cross_entropy(scores: Array, targets: Array) -> tuple[float, Array]:
    """Return the loss on ``softmax(scores)`` and dL/dscores.

    For one-hot targets the gradient reduces to ``predictions - targets``.
    """

    predictions = softmax(scores)
    return cross_entropy(predictions, targets), predictions - targets


__all__ = ["cross_entropy", "softmax_cross_entropy"]
