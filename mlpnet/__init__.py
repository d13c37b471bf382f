"""mlpnet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.init import InitMethod
from .core.network import MultilayerPerceptron
from .core.types import ConfigurationError, Dataset
from .data import DatasetError, get_dataset, load_records
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import EarlyStopping, FixedEpochs, SGDOptimizer, Trainer, TrainingConfig

__all__ = [
    "Activation",
    "ConfigurationError",
    "Dataset",
    "DatasetError",
    "EarlyStopping",
    "FixedEpochs",
    "InitMethod",
    "MultilayerPerceptron",
    "SGDOptimizer",
    "Trainer",
    "TrainingConfig",
    "activations",
    "get_dataset",
    "load_preset",
    "load_records",
    "presets",
    "run_pipeline",
    "types",
]
