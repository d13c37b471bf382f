"""Core typing contracts for mlpnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List

import numpy as np

Array = np.ndarray


class ConfigurationError(ValueError):
    """Raised when a network, trainer or run is configured inconsistently."""


@dataclass(frozen=True)
class Batch:
    """A single mini-batch of data."""

    inputs: Array
    targets: Array


@dataclass(frozen=True)
class Dataset:
    """Aligned feature and one-hot target matrices."""

    features: Array
    targets: Array

    def __post_init__(self) -> None:
        if self.features.ndim != 2:
            raise ValueError("features must be 2D (num_samples, num_features)")
        if self.targets.ndim != 2:
            raise ValueError("targets must be 2D (num_samples, num_classes)")
        if self.features.shape[0] != self.targets.shape[0]:
            raise ValueError(
                f"features have {self.features.shape[0]} rows but targets have "
                f"{self.targets.shape[0]}"
            )

    @property
    def num_samples(self) -> int:
        return int(self.features.shape[0])

    @property
    def num_features(self) -> int:
        return int(self.features.shape[1])

    @property
    def num_classes(self) -> int:
        return int(self.targets.shape[1])

    def batches(self, batch_size: int) -> Iterator[Batch]:
        """Yield contiguous batches in row order; the last one may be smaller."""

        for start in range(0, self.num_samples, batch_size):
            end = start + batch_size
            yield Batch(inputs=self.features[start:end], targets=self.targets[start:end])


@dataclass
class Layer:
    """Weight matrix of shape ``(in, out)`` and bias vector of length ``out``."""

    weights: Array
    bias: Array

    @property
    def in_dim(self) -> int:
        return int(self.weights.shape[0])

    @property
    def out_dim(self) -> int:
        return int(self.weights.shape[1])


@dataclass
class ForwardTrace:
    """Intermediate outputs captured during the forward pass.

    ``activations[0]`` is the raw input batch and ``activations[k + 1]`` the
    activated output of layer ``k``. ``linear[k]`` is the pre-activation
    output of layer ``k``.
    """

    activations: List[Array]
    linear: List[Array]

    @property
    def output(self) -> Array:
        return self.activations[-1]


Gradients = Dict[str, Array]


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_dims: List[int]
    activation: str
    init: str


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`mlpnet.training.pipelines.run_pipeline`."""

    epochs: int
    mistakes: int | None
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    losses_path: str = ""
    weights_path: str = ""
