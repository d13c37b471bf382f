"""Training loop, losses and evaluation."""

from .losses import cross_entropy, softmax_cross_entropy
from .metrics import EvaluationReport, count_mistakes, evaluate
from .trainer import EarlyStopping, FixedEpochs, SGDOptimizer, Trainer, TrainingConfig

__all__ = [
    "EarlyStopping",
    "EvaluationReport",
    "FixedEpochs",
    "SGDOptimizer",
    "Trainer",
    "TrainingConfig",
    "count_mistakes",
    "cross_entropy",
    "evaluate",
    "softmax_cross_entropy",
]
