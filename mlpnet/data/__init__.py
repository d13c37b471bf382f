"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import records as _records  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .records import DatasetError, load_records
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetError",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "load_records",
    "register_dataset",
]
