import numpy as np
import pytest

from mlpnet.core.activations import get_activation, relu, sigmoid, sigmoid_prime, tanh_prime
from mlpnet.core.errors import InvalidTopology, ShapeMismatch
from mlpnet.core.linalg import NumpyOps, outer
from mlpnet.core.network import Network
from mlpnet.core.types import DataSet, Gradients


def test_sigmoid_and_derivative():
    x = np.array([[-2.0], [0.0], [3.0]])
    assert sigmoid(np.array(0.0)) == 0.5
    assert np.allclose(sigmoid(x) + sigmoid(-x), 1.0)
    assert np.allclose(sigmoid_prime(x), sigmoid(x) * (1.0 - sigmoid(x)))
    assert sigmoid_prime(np.array(0.0)) == 0.25


def test_alternative_activations():
    x = np.array([-1.0, 0.0, 2.5])
    assert np.allclose(relu(x), [0.0, 0.0, 2.5])
    assert np.allclose(get_activation("relu").derivative(x), [0.0, 0.0, 1.0])
    assert np.allclose(tanh_prime(np.zeros(2)), 1.0)
    with pytest.raises(KeyError):
        get_activation("softsign")


def test_numpy_ops_outer_and_argmax():
    ops = NumpyOps()
    col = np.array([[1.0], [2.0]])
    row = np.array([[3.0], [4.0], [5.0]])
    assert outer(ops, col, row).shape == (2, 3)
    assert np.array_equal(outer(ops, col, row), col @ row.T)
    assert ops.argmax(np.array([[0.1], [0.7], [0.7]])) == 1


def test_single_neuron_forward_is_exact():
    x, w, b = 7.0, 4.0, -25.0
    net = Network.from_parameters([[[w]]], [[[b]]])
    trace = net.forward(np.array([[x]]))
    assert trace.output[0, 0] == sigmoid(np.float64(x * w + b))
    assert trace.weighted_sums[0][0, 0] == 3.0
    assert len(trace.activations) == 2


def test_three_by_two_layer_forward():
    W = np.array([[1.0, 3.0, 5.0], [2.0, 4.0, 6.0]])
    B = np.array([[-5.0], [-3.0]])
    x = np.array([[2.0], [3.0], [4.0]])
    net = Network.from_parameters([W], [B])
    out = net.predict(x)
    for j in range(2):
        expected = sigmoid(sum(W[j, k] * x[k, 0] for k in range(3)) + B[j, 0])
        assert out[j, 0] == pytest.approx(expected, abs=1e-15)


def test_construction_shapes_and_seeding():
    sizes = [5, 10, 5, 2]
    net_a = Network(sizes, rng=np.random.default_rng(7))
    net_b = Network(sizes, rng=np.random.default_rng(7))
    assert net_a.num_layers == 3
    for idx, (W, b) in enumerate(zip(net_a.weights, net_a.biases)):
        assert W.shape == (sizes[idx + 1], sizes[idx])
        assert b.shape == (sizes[idx + 1], 1)
    for key, value in net_a.parameters().items():
        assert np.array_equal(value, net_b.parameters()[key])
    assert net_a.parameter_count() == 5 * 10 + 10 + 10 * 5 + 5 + 5 * 2 + 2


def test_initial_parameters_are_standard_normal():
    net = Network([200, 300], rng=np.random.default_rng(0))
    values = net.weights[0].ravel()
    assert abs(values.mean()) < 0.02
    assert abs(values.std() - 1.0) < 0.02


@pytest.mark.parametrize(
    "sizes", [[], [4], [3, 0], [2, -1], [2.5, 3], [None, 3], ["abc", 2], ["3", 2], [True, 2]]
)
def test_invalid_topology(sizes):
    with pytest.raises(InvalidTopology):
        Network(sizes)


def test_forward_rejects_wrong_width():
    net = Network([3, 2], rng=np.random.default_rng(0))
    with pytest.raises(ShapeMismatch):
        net.forward(np.ones((4, 1)))
    with pytest.raises(ShapeMismatch):
        net.forward(np.ones((1, 3)))
    flat = net.predict(np.ones(3))
    assert flat.shape == (2, 1)


def test_predict_is_idempotent():
    net = Network([4, 6, 3], rng=np.random.default_rng(1))
    x = np.linspace(0.0, 1.0, 4).reshape(-1, 1)
    first = net.predict(x)
    second = net.predict(x)
    assert np.array_equal(first, second)


def test_apply_gradients_subtracts_step():
    net = Network.from_parameters([np.ones((2, 2))], [np.zeros((2, 1))])
    step = Gradients(weights=[np.full((2, 2), 0.25)], biases=[np.full((2, 1), -1.0)])
    net.apply_gradients(step)
    assert np.array_equal(net.weights[0], np.full((2, 2), 0.75))
    assert np.array_equal(net.biases[0], np.ones((2, 1)))

    bad = Gradients(weights=[np.ones((3, 2))], biases=[np.ones((2, 1))])
    with pytest.raises(ShapeMismatch):
        net.apply_gradients(bad)
    assert np.array_equal(net.weights[0], np.full((2, 2), 0.75))

    missing_bias = Gradients(weights=[np.ones((2, 2))], biases=[])
    with pytest.raises(ShapeMismatch):
        net.apply_gradients(missing_bias)
    assert np.array_equal(net.weights[0], np.full((2, 2), 0.75))


def test_apply_gradients_updates_arrays_in_place():
    net = Network([2, 3, 2], rng=np.random.default_rng(6))
    held_w, held_b = net.weights[0], net.biases[1]
    expected_w, expected_b = held_w - 0.5, held_b + 2.0
    step = Gradients(
        weights=[np.full((3, 2), 0.5), np.zeros((2, 3))],
        biases=[np.zeros((3, 1)), np.full((2, 1), -2.0)],
    )
    net.apply_gradients(step)
    assert net.weights[0] is held_w and net.biases[1] is held_b
    assert np.array_equal(held_w, expected_w)
    assert np.array_equal(held_b, expected_b)


def test_from_parameters_does_not_alias_caller_arrays():
    weights, biases = [np.ones((2, 2))], [np.zeros((2, 1))]
    net = Network.from_parameters(weights, biases)
    net.apply_gradients(Gradients(weights=[np.ones((2, 2))], biases=[np.ones((2, 1))]))
    assert np.array_equal(weights[0], np.ones((2, 2)))
    assert np.array_equal(biases[0], np.zeros((2, 1)))


def test_dataset_rejects_integer_index():
    data = DataSet.from_arrays(np.ones((3, 2)), np.eye(2)[[0, 1, 0]])
    assert len(data[1:]) == 2
    with pytest.raises(TypeError):
        data[0]
