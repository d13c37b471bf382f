"""Activation functions and softmax for mlpnet."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

import numpy as np

from .types import Array, ConfigurationError

_LEAK = 0.01


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def _relu_deriv(z: Array) -> Array:
    return (z > 0).astype(np.float64)


def leaky_relu(x: Array) -> Array:
    return np.maximum(_LEAK * x, x)


def _leaky_relu_deriv(z: Array) -> Array:
    return np.where(z > 0, 1.0, _LEAK)


def sigmoid(x: Array) -> Array:
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def _sigmoid_deriv(z: Array) -> Array:
    s = sigmoid(z)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def _tanh_deriv(z: Array) -> Array:
    return 1.0 - np.tanh(z) ** 2


def linear(x: Array) -> Array:
    # Affine 3z + 1, not the identity.
    return 3.0 * x + 1.0


def _linear_deriv(z: Array) -> Array:
    return np.full_like(z, 3.0, dtype=np.float64)


class Activation(str, Enum):
    """Closed set of hidden-layer activations."""

    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    LINEAR = "linear"

    def apply(self, z: Array) -> Array:
        return _FORWARD[self](z)

    def derivative(self, z: Array) -> Array:
        """Derivative evaluated at the pre-activation ``z``."""

        return _DERIVATIVE[self](z)

    @classmethod
    def parse(cls, name: "str | Activation") -> "Activation":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown activation {name!r}. Available: {choices}")


_FORWARD: Dict[Activation, Callable[[Array], Array]] = {
    Activation.RELU: relu,
    Activation.LEAKY_RELU: leaky_relu,
    Activation.SIGMOID: sigmoid,
    Activation.TANH: tanh,
    Activation.LINEAR: linear,
}

_DERIVATIVE: Dict[Activation, Callable[[Array], Array]] = {
    Activation.RELU: _relu_deriv,
    Activation.LEAKY_RELU: _leaky_relu_deriv,
    Activation.SIGMOID: _sigmoid_deriv,
    Activation.TANH: _tanh_deriv,
    Activation.LINEAR: _linear_deriv,
}


def softmax(scores: Array) -> Array:
    """Row-wise softmax; a 1D input is treated as a single row."""

    scores = np.asarray(scores, dtype=np.float64)
    shifted = scores - scores.max(axis=-1, keepdims=True)
    exp = np.exp(shifted)
    return exp / exp.sum(axis=-1, keepdims=True)


__all__ = [
    "Activation",
    "leaky_relu",
    "linear",
    "relu",
    "sigmoid",
    "softmax",
    "tanh",
]
