"""Deterministic offline datasets for presets, smoke runs and tests."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from ..core.types import Dataset
from .registry import DatasetSpec, register_dataset

_CORNERS = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])

_LABELLINGS: Dict[str, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    "xor": np.logical_xor,
    "or": np.logical_or,
    "and": np.logical_and,
}


def _one_hot(labels: np.ndarray, num_classes: int) -> np.ndarray:
    return np.eye(num_classes, dtype=np.float64)[labels]


def _min_max(array: np.ndarray, low: np.ndarray, high: np.ndarray) -> np.ndarray:
    span = np.where(high - low == 0, 1.0, high - low)
    return np.clip((array - low) / span, 0.0, 1.0)


def make_blobs(
    n_samples: int,
    n_features: int,
    n_classes: int,
    *,
    spread: float = 0.5,
    seed: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Return raw Gaussian-cluster features and integer labels."""

    rng = np.random.default_rng(seed)
    centers = rng.uniform(-3.0, 3.0, size=(n_classes, n_features))
    labels = np.arange(n_samples) % n_classes
    rng.shuffle(labels)
    features = centers[labels] + spread * rng.standard_normal((n_samples, n_features))
    return features, labels


@register_dataset("blobs")
def load_blobs(
    *,
    n_samples: int = 256,
    n_validation: int = 64,
    n_features: int = 4,
    n_classes: int = 3,
    spread: float = 0.5,
    seed: int = 0,
) -> DatasetSpec:
    """Gaussian clusters scaled to ``[0, 1]`` with one-hot targets."""

    features, labels = make_blobs(
        n_samples + n_validation, n_features, n_classes, spread=spread, seed=seed
    )
    train_x, val_x = features[:n_samples], features[n_samples:]
    low, high = train_x.min(axis=0), train_x.max(axis=0)
    train = Dataset(
        features=_min_max(train_x, low, high),
        targets=_one_hot(labels[:n_samples], n_classes),
    )
    validation = None
    if n_validation > 0:
        validation = Dataset(
            features=_min_max(val_x, low, high),
            targets=_one_hot(labels[n_samples:], n_classes),
        )
    provenance = {
        "name": "blobs",
        "n_samples": n_samples,
        "n_validation": n_validation,
        "n_features": n_features,
        "n_classes": n_classes,
        "spread": spread,
        "seed": seed,
    }
    return DatasetSpec(name="blobs", train=train, validation=validation, provenance=provenance)


@register_dataset("four_corners")
def load_four_corners(*, labelling: str = "xor") -> DatasetSpec:
    """The four binary 2-feature rows labelled by a boolean function.

    The validation split is the training split.
    """

    if labelling not in _LABELLINGS:
        raise ValueError(
            f"Unknown labelling {labelling!r}; expected one of {sorted(_LABELLINGS)}"
        )
    labels = _LABELLINGS[labelling](_CORNERS[:, 0] > 0, _CORNERS[:, 1] > 0).astype(int)
    dataset = Dataset(features=_CORNERS.copy(), targets=_one_hot(labels, 2))
    provenance = {"name": "four_corners", "labelling": labelling}
    return DatasetSpec(
        name="four_corners", train=dataset, validation=dataset, provenance=provenance
    )


__all__ = ["load_blobs", "load_four_corners", "make_blobs"]
