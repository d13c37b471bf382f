"""Loader for label-first numeric CSV records (MNIST-in-CSV layout)."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import OneHotEncoder

from ..core.types import Dataset
from .registry import DatasetSpec, register_dataset

GREYSCALE_SCALE = 255.0


class DatasetError(RuntimeError):
    """Raised when a dataset file cannot be parsed into a :class:`Dataset`."""


def _read_frame(path: Path, header: bool) -> pd.DataFrame:
    if not path.exists():
        raise DatasetError(f"Dataset file not found: {path}")
    # The header line is skipped rather than parsed so that the first record
    # fixes the column count and longer records are rejected.
    try:
        return pd.read_csv(
            path,
            header=None,
            skiprows=1 if header else 0,
            dtype=str,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise DatasetError(f"Dataset file {path} has no records") from exc
    except pd.errors.ParserError as exc:
        raise DatasetError(f"Malformed rows in {path}: {exc}") from exc


def _to_numeric(frame: pd.DataFrame, path: Path) -> np.ndarray:
    numeric = frame.apply(pd.to_numeric, errors="coerce")
    bad = numeric.isna().to_numpy()
    if bad.any():
        row, col = np.argwhere(bad)[0]
        raw = frame.iat[row, col]
        problem = "is missing" if pd.isna(raw) else f"is not numeric ({raw!r})"
        raise DatasetError(f"{path}: record {int(row) + 1}, field {int(col) + 1} {problem}")
    return numeric.to_numpy(dtype=np.float64)


def _one_hot(labels: np.ndarray, num_classes: int, path: Path) -> np.ndarray:
    fractional = np.flatnonzero(np.mod(labels, 1) != 0)
    if fractional.size:
        row = int(fractional[0])
        raise DatasetError(f"{path}: record {row + 1} has non-integer label {labels[row]!r}")
    encoder = OneHotEncoder(
        categories=[np.arange(num_classes)],
        sparse_output=False,
        dtype=np.float64,
        handle_unknown="error",
    )
    try:
        return encoder.fit_transform(labels.astype(np.int64).reshape(-1, 1))
    except ValueError as exc:
        raise DatasetError(f"{path}: labels must lie in [0, {num_classes}): {exc}") from exc


def load_records(
    path: str | Path,
    num_features: int,
    num_classes: int,
    *,
    scale: float = GREYSCALE_SCALE,
    header: bool = True,
) -> Dataset:
    """Parse ``<label>,<x1>,...,<xF>`` rows into features and one-hot targets.

    Features are divided by ``scale`` so that raw 0-255 intensities land in
    ``[0, 1]``. Any malformed row aborts the load.
    """

    path = Path(path)
    frame = _read_frame(path, header)
    expected = num_features + 1
    if frame.shape[1] != expected:
        raise DatasetError(
            f"{path}: expected {expected} columns (label + {num_features} features), "
            f"found {frame.shape[1]}"
        )
    values = _to_numeric(frame, path)
    features = values[:, 1:] / float(scale)
    targets = _one_hot(values[:, 0], num_classes, path)
    return Dataset(features=features, targets=targets)


@register_dataset("csv")
def load_csv_records(
    *,
    train_path: str | Path,
    validation_path: str | Path | None = None,
    num_features: int = 784,
    num_classes: int = 10,
    scale: float = GREYSCALE_SCALE,
    header: bool = True,
) -> DatasetSpec:
    """Load a training file and an optional validation file."""

    train = load_records(train_path, num_features, num_classes, scale=scale, header=header)
    validation = None
    if validation_path is not None:
        validation = load_records(
            validation_path, num_features, num_classes, scale=scale, header=header
        )
    provenance = {
        "name": "csv",
        "train_path": str(train_path),
        "validation_path": None if validation_path is None else str(validation_path),
        "num_features": num_features,
        "num_classes": num_classes,
        "scale": scale,
        "header": header,
    }
    return DatasetSpec(name="csv", train=train, validation=validation, provenance=provenance)


__all__ = ["DatasetError", "GREYSCALE_SCALE", "load_csv_records", "load_records"]
