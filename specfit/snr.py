"""Signal-to-noise estimates for spectra: neighbour differences and DER_SNR."""

from __future__ import annotations

import functools
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

_CONVERSION = math.sqrt(1.5)
_DER_SNR_ORDER = 3
_DER_SNR_F3 = 0.6052697319


@dataclass
class SNRResult:
    """One-sigma noise level and the signal-to-noise ratio."""

    noise: float = 0.0
    snr: float = 0.0


@dataclass(eq=False)
class SNRCurveResult:
    """Noise and signal-to-noise along a spectrum, one entry per window."""

    lam: np.ndarray
    noise: np.ndarray
    snr: np.ndarray


def _as_vector(values) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(-1)


def _median(values: np.ndarray) -> float:
    return float(np.median(values)) if values.size else math.nan


def _std(values: np.ndarray, mu: float) -> float:
    if values.size < 2:
        return 0.0
    return math.sqrt(float(np.sum((values - mu) ** 2)) / (values.size - 1))


def _ratio(signal: float, noise: float) -> float:
    return signal / noise if noise > 0.0 else math.inf


def _linear_interpolate(x_new: np.ndarray, x_old: np.ndarray, y_old: np.ndarray) -> np.ndarray:
    if x_old.size != y_old.size or x_old.size < 2:
        raise ValueError("Invalid interpolation table.")
    hi = np.clip(np.searchsorted(x_old, x_new, side="right"), 1, x_old.size - 1)
    lo = hi - 1
    with np.errstate(divide="ignore", invalid="ignore"):
        t = (x_new - x_old[lo]) / (x_old[hi] - x_old[lo])
    out = (1.0 - t) * y_old[lo] + t * y_old[hi]
    out = np.where(x_new <= x_old[0], y_old[0], out)
    return np.where(x_new >= x_old[-1], y_old[-1], out)


def get_signal_to_noise(flux, neighbor: int = 2) -> SNRResult:
    """Noise from the differences ``f_i - (f_{i-n} + f_{i+n}) / 2``.

    The differences are 2-sigma clipped once; their standard deviation
    divided by sqrt(3/2) is the noise.  The signal is the median flux.
    A flux whose differences all vanish gives zero noise and infinite S/N.
    """
    values = _as_vector(flux)
    if neighbor < 0:
        raise ValueError("get_signal_to_noise: neighbour must not be negative.")
    n = values.size
    if n < 2 * neighbor + 1:
        raise ValueError(
            "get_signal_to_noise: flux vector too short for chosen neighbour."
        )

    ndist = values[neighbor:n - neighbor] - 0.5 * (
        values[: n - 2 * neighbor] + values[2 * neighbor:]
    )
    if np.all(ndist == 0.0):
        return SNRResult(0.0, math.inf)

    mu = float(np.mean(ndist))
    sig = _std(ndist, mu)
    ndist = ndist[(ndist >= mu - 2.0 * sig) & (ndist <= mu + 2.0 * sig)]

    mu = float(np.mean(ndist)) if ndist.size else math.nan
    noise = _std(ndist, mu) / _CONVERSION
    return SNRResult(noise, _ratio(_median(values), noise))


def der_snr(flux) -> SNRResult:
    """DER_SNR noise estimate (order 3); needs at least six pixels."""
    values = _as_vector(flux)
    n = values.size
    order = _DER_SNR_ORDER
    if n < 2 * order:
        raise ValueError("der_snr: not enough data points.")

    signal = _median(values)
    diffs = 2.0 * values[order:n - order] - values[: n - 2 * order] - values[2 * order:]
    noise = _DER_SNR_F3 * _median(np.abs(diffs))
    return SNRResult(noise, _ratio(signal, noise))


def _windowed_curve(
    lam, flux, data_points: int, estimate: Callable[[np.ndarray], SNRResult]
) -> SNRCurveResult:
    wavelengths = _as_vector(lam)
    values = _as_vector(flux)
    length = wavelengths.size
    if values.size != length:
        raise ValueError("lambda / flux length mismatch.")
    if length == 0:
        raise ValueError("empty spectrum.")

    span = min(max(data_points, 1), length) - 1
    half = span // 2
    step = max(1, half)

    centres: list[float] = []
    noise: list[float] = []
    snr: list[float] = []

    def add(lo: int) -> None:
        result = estimate(values[lo:lo + span + 1])
        centres.append(float(wavelengths[lo + half]))
        noise.append(result.noise)
        snr.append(result.snr)

    index = 0
    while index + span <= length - 1:
        add(index)
        index += step
    add(length - 1 - span)

    return SNRCurveResult(np.array(centres), np.array(noise), np.array(snr))


def get_signal_to_noise_curve(
    lam, flux, data_points: int = 3000, neighbor: int = 2
) -> SNRCurveResult:
    """Neighbour-difference noise in windows of ``data_points`` with 50 % overlap.

    A final window always ends at the last pixel.
    """
    estimate = functools.partial(get_signal_to_noise, neighbor=neighbor)
    return _windowed_curve(lam, flux, data_points, estimate)


def der_snr_curve(lam, flux, data_points: int = 300) -> SNRCurveResult:
    """DER_SNR noise in windows of ``data_points`` with 50 % overlap."""
    return _windowed_curve(lam, flux, data_points, der_snr)


def snr_curve(
    lam,
    flux,
    method: str = "der_snr",
    data_points: int = 300,
    interpolate_back: bool = True,
    neighbor: int = 2,
) -> SNRCurveResult:
    """Noise curve by ``"der_snr"`` or ``"gauss"``, optionally on the native grid.

    With ``interpolate_back`` the window noise, extended by estimates over
    the first and last pixels, is linearly interpolated onto ``lam`` and the
    S/N becomes ``flux / noise`` pixel by pixel.
    """
    if method not in ("der_snr", "gauss"):
        raise ValueError("snr_curve: method must be 'der_snr' or 'gauss'.")

    if method == "der_snr":
        estimate: Callable[[np.ndarray], SNRResult] = der_snr
        base = der_snr_curve(lam, flux, data_points)
    else:
        estimate = functools.partial(get_signal_to_noise, neighbor=neighbor)
        base = get_signal_to_noise_curve(lam, flux, data_points, neighbor)

    if not interpolate_back:
        return base

    wavelengths = _as_vector(lam)
    values = _as_vector(flux)
    length = wavelengths.size
    iedge = max(min(data_points, length - 1), length // 20)

    x_old = np.concatenate(([wavelengths[0]], base.lam, [wavelengths[-1]]))
    y_old = np.concatenate(
        (
            [estimate(values[: iedge + 1]).noise],
            base.noise,
            [estimate(values[length - iedge - 1:]).noise],
        )
    )
    err = _linear_interpolate(wavelengths, x_old, y_old)
    with np.errstate(divide="ignore", invalid="ignore"):
        snr = values / err
    return SNRCurveResult(wavelengths.copy(), err, snr)