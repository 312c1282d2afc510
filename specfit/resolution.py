"""Degrading a spectrum to a wavelength-dependent resolving power."""

from __future__ import annotations

import math

import numpy as np

_SIGMA_FROM_FWHM = 1.0 / (2.0 * math.sqrt(2.0 * math.log(2.0)))
_KERNEL_RADIUS = 5.0
_CHUNK_ELEMENTS = 1 << 21


def degrade_resolution(lam, flux, res_offset: float, res_slope: float) -> np.ndarray:
    """Convolve with a Gaussian of FWHM ``lam / R(lam)``, ``R = res_offset + res_slope * lam``.

    Each output pixel is the average of the input over +-5 sigma, weighted
    by the Gaussian times the local pixel width.
    """
    wavelengths = np.asarray(lam, dtype=float).reshape(-1)
    values = np.asarray(flux, dtype=float).reshape(-1)
    n = wavelengths.size
    if n < 2:
        raise ValueError("degrade_resolution: at least two wavelengths are required")
    if values.size != n:
        raise ValueError("degrade_resolution: wavelength and flux lengths differ")

    width = np.empty(n, dtype=float)
    width[0] = wavelengths[1] - wavelengths[0]
    width[-1] = wavelengths[-1] - wavelengths[-2]
    width[1:-1] = 0.5 * (wavelengths[2:] - wavelengths[:-2])

    with np.errstate(divide="ignore", invalid="ignore"):
        resolving_power = res_offset + res_slope * wavelengths
        sigma = wavelengths / resolving_power * _SIGMA_FROM_FWHM
        inv_two_sigma2 = 1.0 / (2.0 * sigma * sigma)

    start = np.searchsorted(wavelengths, wavelengths - _KERNEL_RADIUS * sigma, side="left")
    end = np.searchsorted(wavelengths, wavelengths + _KERNEL_RADIUS * sigma, side="right")
    end = np.maximum(end, start)

    span = max(int((end - start).max()), 1)
    rows = max(1, _CHUNK_ELEMENTS // span)
    offsets = np.arange(span)
    out = np.empty(n, dtype=float)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for a in range(0, n, rows):
            b = min(n, a + rows)
            idx = start[a:b, None] + offsets
            valid = idx < end[a:b, None]
            idx = np.minimum(idx, n - 1)
            delta = wavelengths[idx] - wavelengths[a:b, None]
            weights = np.exp(-delta * delta * inv_two_sigma2[a:b, None]) * width[idx]
            weights = np.where(valid, weights, 0.0)
            weighted = np.where(valid, weights * values[idx], 0.0)
            out[a:b] = weighted.sum(axis=1) / weights.sum(axis=1)
    return out