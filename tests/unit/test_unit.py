import numpy as np
import pytest

from unitnet.core import activations
from unitnet.core.activations import ActivationKind
from unitnet.core.unit import Unit


def _inputs(*values):
    layer = []
    for value in values:
        unit = Unit(ActivationKind.IDENTITY)
        unit.value = value
        layer.append(unit)
    return layer


def test_activate_is_bias_plus_weighted_sum():
    unit = Unit(ActivationKind.IDENTITY, weights=[0.5, -0.25], bias=0.1)
    unit.connect(_inputs(1.0, 2.0))
    assert unit.activate() == pytest.approx(0.1)
    assert unit.value == pytest.approx(0.1)
    assert unit.derivative == 1.0


def test_derivative_uses_activated_value():
    unit = Unit(ActivationKind.SIGMOID, bias=2.0)
    unit.activate()
    assert unit.value == pytest.approx(activations.sigmoid(2.0))
    assert unit.derivative == pytest.approx(activations.sigmoid_derivative(unit.value))
    assert unit.derivative != pytest.approx(activations.sigmoid_derivative(2.0))


def test_connect_keeps_matching_weights():
    unit = Unit(ActivationKind.LINEAR, weights=[0.3, 0.4])
    unit.connect(_inputs(0.0, 0.0))
    assert np.array_equal(unit.weights, [0.3, 0.4])
    unit.connect(_inputs(0.0, 0.0, 0.0))
    assert np.array_equal(unit.weights, np.zeros(3))
    assert unit.prev_weight_delta.shape == (3,)


def test_randomize_parameters_range_and_reset():
    unit = Unit(ActivationKind.SIGMOID)
    unit.connect(_inputs(*([0.0] * 50)))
    unit.error = 3.0
    unit.prev_bias_delta = 1.0
    unit.randomize_parameters(np.random.default_rng(0))
    assert np.all(unit.weights >= -1.0) and np.all(unit.weights < 1.0)
    assert -1.0 <= unit.bias < 1.0
    assert unit.error == 0.0
    assert unit.prev_bias_delta == 0.0
    assert np.array_equal(unit.prev_weight_delta, np.zeros(50))


def test_randomize_parameters_is_seeded():
    first = Unit(ActivationKind.SIGMOID)
    second = Unit(ActivationKind.SIGMOID)
    first.connect(_inputs(0.0, 0.0, 0.0))
    second.connect(_inputs(0.0, 0.0, 0.0))
    first.randomize_parameters(np.random.default_rng(42))
    second.randomize_parameters(np.random.default_rng(42))
    assert np.array_equal(first.weights, second.weights)
    assert first.bias == second.bias


def test_apply_update_with_momentum():
    layer = _inputs(2.0)
    unit = Unit(ActivationKind.IDENTITY, weights=[0.5], bias=0.0)
    unit.connect(layer)
    unit.error = 0.2

    unit.apply_update(layer, learning_rate=0.1, momentum=0.5)
    assert unit.weights[0] == pytest.approx(0.46)
    assert unit.bias == pytest.approx(-0.02)

    unit.apply_update(layer, learning_rate=0.1, momentum=0.5)
    # 0.04 gradient step plus half of the previous 0.04 delta.
    assert unit.weights[0] == pytest.approx(0.40)
    assert unit.prev_weight_delta[0] == pytest.approx(0.06)
    assert unit.bias == pytest.approx(-0.05)
    assert unit.prev_bias_delta == pytest.approx(0.03)


def test_apply_update_divides_gradient_by_scale():
    layer = _inputs(2.0)
    unit = Unit(ActivationKind.IDENTITY, weights=[0.5], bias=0.0)
    unit.connect(layer)
    unit.error = 0.2
    unit.apply_update(layer, learning_rate=0.1, momentum=0.0, scale=2.0)
    assert unit.weights[0] == pytest.approx(0.48)
    assert unit.bias == pytest.approx(-0.01)


def test_copy_from_is_independent():
    source = Unit(ActivationKind.SIGMOID, weights=[0.1, 0.2], bias=0.3)
    source.prev_weight_delta = np.array([0.01, 0.02])
    target = Unit()
    target.copy_from(source)
    assert target.activation is ActivationKind.SIGMOID
    assert np.array_equal(target.prev_weight_delta, source.prev_weight_delta)
    target.weights[0] = 9.0
    target.prev_weight_delta[1] = 9.0
    assert source.weights[0] == 0.1
    assert source.prev_weight_delta[1] == 0.02
