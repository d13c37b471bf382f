"""Multilayer perceptron with explicit forward and backward passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

import numpy as np

from .activations import Activation, softmax
from .init import InitMethod, init_layers, validate_layer_dims
from .types import Array, ForwardTrace, Gradients, Layer, ModelDescription


@dataclass
class MultilayerPerceptron:
    """Fully connected network trained by backpropagation.

    Every layer but the last applies ``activation``; the last layer is
    linear and its scores are turned into probabilities by softmax.
    """

    layer_dims: Sequence[int]
    activation: Activation | str = Activation.RELU
    init: InitMethod | str = InitMethod.DEFAULT
    seed: int | None = None
    rng: np.random.Generator | None = field(default=None, repr=False)
    layers: List[Layer] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.layer_dims = validate_layer_dims(self.layer_dims)
        self.activation = Activation.parse(self.activation)
        self.init = InitMethod.parse(self.init)
        if self.rng is None:
            self.rng = np.random.default_rng(self.seed)
        self.reset()

    def describe(self) -> ModelDescription:
        return ModelDescription(
            layer_dims=list(self.layer_dims),
            activation=self.activation.value,
            init=self.init.value,
        )

    def reset(self) -> None:
        self.layers = init_layers(self.layer_dims, self.init, self.rng)

    def forward(self, inputs: Array) -> ForwardTrace:
        x = np.asarray(inputs, dtype=np.float64)
        activations: list[Array] = [x]
        linear: list[Array] = []
        last_idx = len(self.layers) - 1
        for idx, layer in enumerate(self.layers):
            z = x @ layer.weights + layer.bias
            x = self.activation.apply(z) if idx < last_idx else z
            linear.append(z)
            activations.append(x)
        return ForwardTrace(activations=activations, linear=linear)

    def backward(self, trace: ForwardTrace, error: Array) -> Gradients:
        """Return ``W{i}``/``b{i}`` gradients given dL/d(output scores).

        Weight gradients are summed over the batch, bias gradients averaged.
        Parameters are not touched, so propagation always sees the weights
        that produced ``trace``.
        """

        grads: Gradients = {}
        delta = error
        last_idx = len(self.layers) - 1
        for idx in reversed(range(len(self.layers))):
            if idx != last_idx:
                delta = delta * self.activation.derivative(trace.linear[idx])
            grads[f"W{idx}"] = trace.activations[idx].T @ delta
            grads[f"b{idx}"] = delta.mean(axis=0)
            if idx > 0:
                delta = delta @ self.layers[idx].weights.T
        return grads

    def apply_gradients(self, grads: Gradients) -> None:
        """Add already-scaled updates, replacing each parameter array."""

        for idx, layer in enumerate(self.layers):
            w_step = grads.get(f"W{idx}")
            b_step = grads.get(f"b{idx}")
            weights = layer.weights if w_step is None else layer.weights + w_step
            bias = layer.bias if b_step is None else layer.bias + b_step
            self.layers[idx] = Layer(weights=weights, bias=bias)

    def predict_proba(self, inputs: Array) -> Array:
        return softmax(self.forward(inputs).output)

    def predict(self, inputs: Array) -> Array:
        return self.predict_proba(inputs).argmax(axis=1)

    def state_dict(self) -> Mapping[str, Array]:
        state: dict[str, Array] = {}
        for idx, layer in enumerate(self.layers):
            state[f"W{idx}"] = layer.weights.copy()
            state[f"b{idx}"] = layer.bias.copy()
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        layers: list[Layer] = []
        for idx, layer in enumerate(self.layers):
            w_key, b_key = f"W{idx}", f"b{idx}"
            if w_key not in state or b_key not in state:
                raise KeyError(f"Missing {w_key}/{b_key} in state dict")
            W = np.asarray(state[w_key], dtype=np.float64)
            b = np.asarray(state[b_key], dtype=np.float64)
            if W.shape != layer.weights.shape or b.shape != layer.bias.shape:
                raise ValueError(
                    f"Layer {idx} expects {layer.weights.shape}/{layer.bias.shape}, "
                    f"got {W.shape}/{b.shape}"
                )
            layers.append(Layer(weights=W.copy(), bias=b.copy()))
        self.layers = layers

    def parameter_count(self) -> int:
        return int(sum(layer.weights.size + layer.bias.size for layer in self.layers))


__all__ = ["MultilayerPerceptron"]
