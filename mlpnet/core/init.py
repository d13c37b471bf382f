"""Parameter initialisation policies."""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence

import numpy as np

from .types import ConfigurationError, Layer

DEFAULT_WEIGHT_BOUND = 0.3


class InitMethod(str, Enum):
    """Weight/bias initialisation policy."""

    DEFAULT = "default"
    XAVIER = "xavier"

    def weight_bound(self, fan_in: int, fan_out: int) -> float:
        if self is InitMethod.XAVIER:
            # sqrt(6) over the plain sum of fans, no square root on the sum.
            return float(np.sqrt(6.0) / (fan_in + fan_out))
        return DEFAULT_WEIGHT_BOUND

    def bias_value(self) -> float:
        return 1.0 if self is InitMethod.DEFAULT else 0.0

    @classmethod
    def parse(cls, name: "str | InitMethod") -> "InitMethod":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ConfigurationError(
                f"Unknown initialisation {name!r}. Available: {choices}"
            ) from exc


def validate_layer_dims(layer_dims: Sequence[int]) -> List[int]:
    dims = [int(d) for d in layer_dims]
    if len(dims) < 2:
        raise ConfigurationError(
            f"At least two layer widths are required, got {list(layer_dims)}"
        )
    if any(d <= 0 for d in dims):
        raise ConfigurationError(f"Layer widths must be positive, got {dims}")
    return dims


def init_layers(
    layer_dims: Sequence[int],
    method: InitMethod | str = InitMethod.DEFAULT,
    rng: np.random.Generator | None = None,
) -> List[Layer]:
    """Build ``len(layer_dims) - 1`` layers according to ``method``."""

    dims = validate_layer_dims(layer_dims)
    method = InitMethod.parse(method)
    rng = rng if rng is not None else np.random.default_rng()
    layers: List[Layer] = []
    for in_dim, out_dim in zip(dims[:-1], dims[1:]):
        bound = method.weight_bound(in_dim, out_dim)
        W = rng.uniform(-bound, bound, size=(in_dim, out_dim))
        b = np.full(out_dim, method.bias_value(), dtype=np.float64)
        layers.append(Layer(weights=W, bias=b))
    return layers


__all__ = ["DEFAULT_WEIGHT_BOUND", "InitMethod", "init_layers", "validate_layer_dims"]
