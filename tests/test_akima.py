import numpy as np
import pytest

from specfit.akima import AkimaSpline


def test_passes_through_nodes():
    x = np.array([0.0, 1.0, 2.5, 3.0, 4.2, 6.0])
    y = np.array([1.0, -2.0, 0.5, 3.0, 2.0, 2.5])
    spline = AkimaSpline(x, y)
    assert spline(x) == pytest.approx(y, abs=1e-12)


def test_reproduces_linear_data():
    x = np.linspace(0.0, 10.0, 11)
    spline = AkimaSpline(x, 2.0 * x + 1.0)
    t = np.linspace(0.05, 9.95, 37)
    assert spline(t) == pytest.approx(2.0 * t + 1.0, rel=1e-12)


def test_linear_extrapolation_of_linear_data():
    x = np.linspace(0.0, 10.0, 11)
    spline = AkimaSpline(x, 2.0 * x + 1.0)
    assert spline(15.0) == pytest.approx(2.0 * 15.0 + 1.0, rel=1e-6)
    assert spline(-4.0) == pytest.approx(2.0 * -4.0 + 1.0, rel=1e-5)


def test_extrapolation_is_a_straight_line():
    x = np.arange(6.0)
    spline = AkimaSpline(x, x**2)
    above = [spline(5.0), spline(6.0), spline(7.0)]
    below = [spline(0.0), spline(-1.0), spline(-2.0)]
    assert above[2] - above[1] == pytest.approx(above[1] - above[0], rel=1e-9)
    assert below[2] - below[1] == pytest.approx(below[1] - below[0], rel=1e-9, abs=1e-12)


def test_continuous_at_domain_edges():
    x = np.arange(6.0)
    spline = AkimaSpline(x, np.sin(x))
    assert spline(5.0 + 1e-9) == pytest.approx(spline(5.0), abs=1e-8)
    assert spline(0.0 - 1e-9) == pytest.approx(spline(0.0), abs=1e-8)


def test_step_data_does_not_overshoot():
    x = np.arange(6.0)
    spline = AkimaSpline(x, [0.0, 0.0, 0.0, 1.0, 1.0, 1.0])
    values = spline(np.linspace(0.0, 5.0, 201))
    assert values.min() >= -1e-12
    assert values.max() <= 1.0 + 1e-12


def test_scalar_and_array_results():
    x = np.arange(5.0)
    spline = AkimaSpline(x, x)
    assert isinstance(spline(1.5), float)
    out = spline([1.5, 2.5])
    assert out.shape == (2,)


def test_constant_data_stays_constant_everywhere():
    x = np.arange(5.0)
    spline = AkimaSpline(x, np.full(5, 3.0))
    assert spline(np.array([-10.0, 0.3, 2.7, 50.0])) == pytest.approx([3.0] * 4)


def test_too_few_points_raises():
    with pytest.raises(ValueError):
        AkimaSpline([0.0, 1.0, 2.0], [1.0, 2.0, 3.0])


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        AkimaSpline([0.0, 1.0, 2.0, 3.0], [1.0, 2.0, 3.0])


def test_unsorted_abscissas_raise():
    with pytest.raises(ValueError):
        AkimaSpline([0.0, 2.0, 1.0, 3.0], [1.0, 2.0, 3.0, 4.0])