import numpy as np
import pytest

from mlpnet.core.activations import Activation, softmax
from mlpnet.core.network import MultilayerPerceptron
from mlpnet.core.types import ConfigurationError


def _natural_ce(model: MultilayerPerceptron, x: np.ndarray, t: np.ndarray) -> np.ndarray:
    probs = softmax(model.forward(x).output)
    return -(t * np.log(probs)).sum(axis=1)


def test_forward_output_shape_and_trace():
    model = MultilayerPerceptron([5, 7, 4, 3], activation="sigmoid", seed=0)
    x = np.random.default_rng(1).uniform(size=(6, 5))
    trace = model.forward(x)
    assert trace.output.shape == (6, 3)
    assert len(trace.linear) == 3
    assert len(trace.activations) == 4
    assert [a.shape[1] for a in trace.activations] == [5, 7, 4, 3]


def test_last_layer_is_linear():
    model = MultilayerPerceptron([2, 3, 2], activation="relu", seed=0)
    x = np.array([[0.25, 0.75]])
    trace = model.forward(x)
    assert np.array_equal(trace.output, trace.linear[-1])
    assert np.array_equal(trace.activations[1], np.maximum(trace.linear[0], 0.0))


def test_linear_activation_applies_affine_map_to_hidden_layers():
    model = MultilayerPerceptron([2, 2, 2], activation="linear", seed=0)
    x = np.array([[1.0, 2.0]])
    trace = model.forward(x)
    assert np.allclose(trace.activations[1], 3.0 * trace.linear[0] + 1.0)


def test_predict_probabilities_sum_to_one():
    model = MultilayerPerceptron([4, 6, 3], seed=3)
    x = np.random.default_rng(0).uniform(size=(10, 4))
    probs = model.predict_proba(x)
    assert np.allclose(probs.sum(axis=1), 1.0)
    assert np.array_equal(model.predict(x), probs.argmax(axis=1))


def test_backward_matches_finite_differences():
    model = MultilayerPerceptron([2, 3, 2], activation=Activation.TANH, seed=5)
    x = np.array([[0.2, 0.7], [0.9, 0.1], [0.4, 0.4]])
    t = np.array([[0.0, 1.0], [1.0, 0.0], [0.0, 1.0]])

    trace = model.forward(x)
    error = softmax(trace.output) - t
    grads = model.backward(trace, error)

    h = 1e-6
    for idx, layer in enumerate(model.layers):
        # Weight gradients are summed over rows, bias gradients averaged.
        for i in range(layer.weights.shape[0]):
            for j in range(layer.weights.shape[1]):
                saved = layer.weights[i, j]
                layer.weights[i, j] = saved + h
                up = _natural_ce(model, x, t).sum()
                layer.weights[i, j] = saved - h
                down = _natural_ce(model, x, t).sum()
                layer.weights[i, j] = saved
                numeric = (up - down) / (2 * h)
                assert grads[f"W{idx}"][i, j] == pytest.approx(numeric, abs=1e-4)
        for j in range(layer.bias.shape[0]):
            saved = layer.bias[j]
            layer.bias[j] = saved + h
            up = _natural_ce(model, x, t).mean()
            layer.bias[j] = saved - h
            down = _natural_ce(model, x, t).mean()
            layer.bias[j] = saved
            numeric = (up - down) / (2 * h)
            assert grads[f"b{idx}"][j] == pytest.approx(numeric, abs=1e-4)


def test_backward_leaves_parameters_untouched():
    model = MultilayerPerceptron([3, 4, 2], seed=0)
    before = model.state_dict()
    x = np.ones((2, 3))
    trace = model.forward(x)
    grads = model.backward(trace, np.ones((2, 2)))
    after = model.state_dict()
    for key in before:
        assert np.array_equal(before[key], after[key])
    assert set(grads) == {"W0", "b0", "W1", "b1"}
    assert grads["W0"].shape == (3, 4)
    assert grads["b1"].shape == (2,)


def test_apply_gradients_adds_steps():
    model = MultilayerPerceptron([2, 2], seed=0)
    before = model.state_dict()
    model.apply_gradients({"W0": np.full((2, 2), 0.5), "b0": np.array([1.0, -1.0])})
    assert np.allclose(model.layers[0].weights, before["W0"] + 0.5)
    assert np.allclose(model.layers[0].bias, before["b0"] + [1.0, -1.0])


def test_same_seed_gives_same_network():
    a = MultilayerPerceptron([3, 5, 2], init="xavier", seed=9)
    b = MultilayerPerceptron([3, 5, 2], init="xavier", seed=9)
    for key, value in a.state_dict().items():
        assert np.array_equal(value, b.state_dict()[key])


def test_state_dict_rejects_mismatched_shapes():
    model = MultilayerPerceptron([3, 2], seed=0)
    with pytest.raises(ValueError):
        model.load_state_dict({"W0": np.zeros((2, 2)), "b0": np.zeros(2)})
    with pytest.raises(KeyError):
        model.load_state_dict({"W0": np.zeros((3, 2))})


def test_describe_and_parameter_count():
    model = MultilayerPerceptron([784, 500, 300, 10], activation="LeakyReLU", init="Xavier", seed=0)
    description = model.describe()
    assert description.layer_dims == [784, 500, 300, 10]
    assert description.activation == "leaky_relu"
    assert description.init == "xavier"
    assert model.parameter_count() == 784 * 500 + 500 + 500 * 300 + 300 + 300 * 10 + 10


def test_invalid_configuration_raises():
    with pytest.raises(ConfigurationError):
        MultilayerPerceptron([4])
    with pytest.raises(ConfigurationError):
        MultilayerPerceptron([4, 2], activation="swish")
