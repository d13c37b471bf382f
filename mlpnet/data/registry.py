"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.types import ConfigurationError, Dataset


@dataclass(frozen=True)
class DatasetSpec:
    """Train split, optional validation split and where they came from."""

    name: str
    train: Dataset
    validation: Dataset | None = None
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def num_features(self) -> int:
        return self.train.num_features

    @property
    def num_classes(self) -> int:
        return self.train.num_classes


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("blobs")
        def make_blobs(**kwargs):
            ...

    or directly::

        register_dataset("blobs", make_blobs)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise ConfigurationError(f"Unknown dataset {dataset!r}. Available: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.train.num_samples == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")
    if spec.validation is None:
        return
    if spec.validation.num_features != spec.train.num_features:
        raise ValueError(
            f"Validation split has {spec.validation.num_features} features, "
            f"training split has {spec.train.num_features}"
        )
    if spec.validation.num_classes != spec.train.num_classes:
        raise ValueError(
            f"Validation split has {spec.validation.num_classes} classes, "
            f"training split has {spec.train.num_classes}"
        )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
