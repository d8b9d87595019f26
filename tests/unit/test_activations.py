import pytest

from unitnet.core import activations
from unitnet.core.activations import ActivationKind
from unitnet.core.errors import UnknownActivationError


def test_persisted_codes_are_stable():
    assert int(ActivationKind.LINEAR) == 1
    assert int(ActivationKind.SIGMOID) == 2
    assert int(ActivationKind.IDENTITY) == 3


def test_activation_boundaries():
    assert activations.apply(ActivationKind.LINEAR, 0.0) == 0.0
    assert activations.apply(ActivationKind.SIGMOID, 0.0) == 0.5
    assert activations.apply(ActivationKind.IDENTITY, -3.25) == -3.25


def test_linear_clips_negative_sums():
    assert activations.apply(ActivationKind.LINEAR, -2.0) == 0.0
    assert activations.apply(ActivationKind.LINEAR, 1.5) == 1.5


@pytest.mark.parametrize("x", [-1e6, -3.0, -0.1, 0.1, 3.0, 1e6])
def test_sigmoid_stays_in_open_unit_interval(x):
    y = activations.apply(ActivationKind.SIGMOID, x)
    assert 0.0 < y < 1.0


def test_sigmoid_is_symmetric_around_half():
    for x in (0.25, 1.0, 7.5):
        up = activations.sigmoid(x)
        down = activations.sigmoid(-x)
        assert up + down == pytest.approx(1.0)


def test_derivatives():
    assert activations.derivative(ActivationKind.IDENTITY, 123.0) == 1.0
    assert activations.derivative(ActivationKind.LINEAR, 2.5) == 1.0
    assert activations.derivative(ActivationKind.LINEAR, 0.0) == 0.0
    assert activations.derivative(ActivationKind.SIGMOID, 0.0) == 0.5
    assert activations.derivative(ActivationKind.SIGMOID, 0.5) == pytest.approx(1.0 / 4.5)


def test_unknown_kind_is_rejected():
    with pytest.raises(UnknownActivationError):
        activations.apply(99, 0.0)
    with pytest.raises(UnknownActivationError):
        activations.derivative("sigmoid", 0.1)


def test_coerce_accepts_codes_and_names():
    assert ActivationKind.coerce(2) is ActivationKind.SIGMOID
    assert ActivationKind.coerce("3") is ActivationKind.IDENTITY
    assert ActivationKind.coerce("linear") is ActivationKind.LINEAR
    assert ActivationKind.coerce("Sigmoid") is ActivationKind.SIGMOID
    assert ActivationKind.coerce(ActivationKind.IDENTITY) is ActivationKind.IDENTITY


@pytest.mark.parametrize("bad", [0, 4, -1, "tanh", "7", None])
def test_coerce_rejects_unknown(bad):
    with pytest.raises(UnknownActivationError):
        ActivationKind.coerce(bad)
