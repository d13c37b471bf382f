import numpy as np
import pytest

from mlpnet.core.activations import Activation, softmax
from mlpnet.core.types import ConfigurationError


def test_activation_values_match_table():
    z = np.array([-2.0, 0.0, 1.5])
    assert np.allclose(Activation.RELU.apply(z), [0.0, 0.0, 1.5])
    assert np.allclose(Activation.LEAKY_RELU.apply(z), [-0.02, 0.0, 1.5])
    assert np.allclose(Activation.SIGMOID.apply(z), 1.0 / (1.0 + np.exp(-z)))
    expected_tanh = (np.exp(z) - np.exp(-z)) / (np.exp(z) + np.exp(-z))
    assert np.allclose(Activation.TANH.apply(z), expected_tanh)
    assert np.allclose(Activation.LINEAR.apply(z), [-5.0, 1.0, 5.5])


def test_activation_derivatives_match_table():
    z = np.array([-2.0, 0.0, 1.5])
    assert np.allclose(Activation.RELU.derivative(z), [0.0, 0.0, 1.0])
    assert np.allclose(Activation.LEAKY_RELU.derivative(z), [0.01, 0.01, 1.0])
    s = 1.0 / (1.0 + np.exp(-z))
    assert np.allclose(Activation.SIGMOID.derivative(z), s * (1 - s))
    assert np.allclose(Activation.TANH.derivative(z), 1 - np.tanh(z) ** 2)
    assert np.allclose(Activation.LINEAR.derivative(z), [3.0, 3.0, 3.0])


@pytest.mark.parametrize("activation", list(Activation))
def test_derivative_agrees_with_finite_difference(activation):
    z = np.array([-1.3, -0.4, 0.6, 2.1])
    h = 1e-6
    numeric = (activation.apply(z + h) - activation.apply(z - h)) / (2 * h)
    assert np.allclose(activation.derivative(z), numeric, atol=1e-5)


def test_sigmoid_saturates_without_nan():
    out = Activation.SIGMOID.apply(np.array([-1000.0, 1000.0]))
    assert np.all(np.isfinite(out))
    assert np.allclose(out, [0.0, 1.0])


@pytest.mark.parametrize(
    "name, expected",
    [
        ("ReLU", Activation.RELU),
        ("relu", Activation.RELU),
        ("LeakyReLU", Activation.LEAKY_RELU),
        ("leaky-relu", Activation.LEAKY_RELU),
        ("leaky_relu", Activation.LEAKY_RELU),
        ("Sigmoid", Activation.SIGMOID),
        ("TANH", Activation.TANH),
        ("Linear", Activation.LINEAR),
    ],
)
def test_activation_parse_accepts_common_spellings(name, expected):
    assert Activation.parse(name) is expected


def test_activation_parse_rejects_unknown_name():
    with pytest.raises(ConfigurationError, match="softplus"):
        Activation.parse("softplus")


def test_softmax_rows_are_distributions():
    rng = np.random.default_rng(0)
    scores = rng.normal(0.0, 50.0, size=(32, 7))
    scores[0] = [1e6, -1e6, 0.0, 3.0, 5.0, -2.0, 1e5]
    scores[1] = [-1e6] * 7
    probs = softmax(scores)
    assert np.all(probs >= 0.0)
    assert np.allclose(probs.sum(axis=1), 1.0, atol=1e-9)
    assert probs[0, 0] == pytest.approx(1.0)
    assert np.allclose(probs[1], 1.0 / 7)


def test_softmax_is_shift_invariant():
    scores = np.array([[0.5, -1.0, 2.0], [3.0, 3.0, -4.0]])
    assert np.allclose(softmax(scores), softmax(scores + 100.0), atol=1e-12)
    assert np.allclose(softmax(scores), softmax(scores - 37.5), atol=1e-12)


def test_softmax_accepts_single_row():
    probs = softmax(np.array([1.0, 2.0, 3.0]))
    assert probs.shape == (3,)
    assert probs.sum() == pytest.approx(1.0)
    assert np.argmax(probs) == 2
