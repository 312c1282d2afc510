import math

import numpy as np
import pytest

from specfit.snr import (
    SNRResult,
    der_snr,
    der_snr_curve,
    get_signal_to_noise,
    get_signal_to_noise_curve,
    snr_curve,
)


def _noisy(n, level, sigma, seed=1):
    rng = np.random.default_rng(seed)
    return level + rng.normal(0.0, sigma, n)


def test_constant_flux_has_zero_noise():
    result = get_signal_to_noise(np.full(50, 3.0))
    assert result.noise == 0.0
    assert result.snr == math.inf


def test_linear_flux_has_zero_noise():
    result = get_signal_to_noise(np.linspace(1.0, 5.0, 40), neighbor=3)
    assert result == SNRResult(0.0, math.inf)


def test_gauss_too_short_raises():
    with pytest.raises(ValueError):
        get_signal_to_noise(np.ones(4), neighbor=2)


def test_gauss_noise_scales_with_flux():
    flux = _noisy(2000, 10.0, 0.1)
    base = get_signal_to_noise(flux)
    scaled = get_signal_to_noise(3.0 * flux)
    assert scaled.noise == pytest.approx(3.0 * base.noise)
    assert scaled.snr == pytest.approx(base.snr)


def test_gauss_snr_is_median_over_noise():
    flux = _noisy(1000, 10.0, 0.1)
    result = get_signal_to_noise(flux)
    assert result.snr == pytest.approx(np.median(flux) / result.noise)
    assert 0.0 < result.noise < 0.1


def test_der_snr_recovers_gaussian_noise():
    sigma = 0.05
    flux = _noisy(20000, 1.0, sigma, seed=7)
    result = der_snr(flux)
    assert result.noise == pytest.approx(sigma, rel=0.1)


def test_der_snr_too_short_raises():
    with pytest.raises(ValueError):
        der_snr(np.ones(5))


def test_der_snr_six_pixels_has_undefined_noise():
    result = der_snr(np.arange(6.0))
    assert math.isnan(result.noise)
    assert result.snr == math.inf


def test_der_snr_constant_flux():
    result = der_snr(np.full(30, 2.0))
    assert result.noise == 0.0
    assert result.snr == math.inf


def test_der_snr_curve_windows():
    lam = np.arange(10.0)
    flux = _noisy(10, 1.0, 0.1)
    curve = der_snr_curve(lam, flux, data_points=7)
    assert list(curve.lam) == [3.0, 6.0, 6.0]
    assert curve.noise[0] == der_snr(flux[0:7]).noise
    assert curve.noise[-1] == der_snr(flux[3:10]).noise


def test_gauss_curve_first_and_last_window():
    lam = np.arange(20.0)
    flux = _noisy(20, 5.0, 0.2)
    curve = get_signal_to_noise_curve(lam, flux, data_points=10)
    assert curve.noise[0] == get_signal_to_noise(flux[:10]).noise
    assert curve.noise[-1] == get_signal_to_noise(flux[10:]).noise
    assert set(curve.lam) <= set(lam)
    assert len(curve.lam) == len(curve.noise) == len(curve.snr)


def test_curve_length_mismatch_raises():
    with pytest.raises(ValueError):
        der_snr_curve(np.arange(10.0), np.ones(9))
    with pytest.raises(ValueError):
        get_signal_to_noise_curve(np.arange(10.0), np.ones(11))


def test_snr_curve_rejects_unknown_method():
    with pytest.raises(ValueError):
        snr_curve(np.arange(50.0), np.ones(50), method="median")


def test_snr_curve_without_interpolation_matches_der_snr_curve():
    lam = np.arange(200.0)
    flux = _noisy(200, 1.0, 0.02)
    direct = der_snr_curve(lam, flux, 40)
    wrapped = snr_curve(lam, flux, "der_snr", 40, interpolate_back=False)
    np.testing.assert_array_equal(direct.lam, wrapped.lam)
    np.testing.assert_array_equal(direct.noise, wrapped.noise)


def test_snr_curve_interpolated_back_to_native_grid():
    lam = np.linspace(4000.0, 4100.0, 200)
    flux = _noisy(200, 1.0, 0.02, seed=3)
    result = snr_curve(lam, flux, "der_snr", 20)
    np.testing.assert_array_equal(result.lam, lam)
    np.testing.assert_allclose(result.snr, flux / result.noise)
    assert result.noise[0] == der_snr(flux[:21]).noise
    assert result.noise[-1] == der_snr(flux[-21:]).noise


def test_snr_curve_gauss_edges():
    lam = np.linspace(4000.0, 4100.0, 200)
    flux = _noisy(200, 1.0, 0.02, seed=4)
    result = snr_curve(lam, flux, "gauss", 20, True, 2)
    assert result.noise[0] == get_signal_to_noise(flux[:21], 2).noise
    assert result.noise[-1] == get_signal_to_noise(flux[-21:], 2).noise
    assert result.noise.shape == lam.shape