"""Rotational broadening with a limb-darkened profile."""

from __future__ import annotations

import math

import numpy as np

_C_KMS = 299_792.458


def _rot_profile(x: np.ndarray, eps: float) -> np.ndarray:
    t = np.clip(1.0 - x * x, 0.0, None)
    num = 2.0 * (1.0 - eps) * np.sqrt(t) + 0.5 * math.pi * eps * t
    den = math.pi * (1.0 - eps / 3.0)
    return np.where(np.abs(x) >= 1.0, 0.0, num / den)


def rotational_broaden(lam, flux, vsini_kms: float, epsilon: float = 0.6) -> np.ndarray:
    """Convolve ``flux`` with the rotation profile for ``vsini_kms``.

    The kernel is sampled at the mean positive wavelength step, its
    half-width is ``mean(lam) * vsini / c`` and it is normalised once; near
    the ends the truncated kernel is not renormalised.  Non-positive
    ``vsini`` or a grid without increasing steps returns the flux unchanged.
    """
    wavelengths = np.asarray(lam, dtype=float).reshape(-1)
    values = np.array(flux, dtype=float).reshape(-1)
    n = values.size
    if n == 0 or vsini_kms <= 0.0:
        return values

    steps = np.diff(wavelengths[:n])
    positive = steps[steps > 0.0]
    if positive.size == 0:
        return values
    dlam_mean = float(positive.mean())

    dl_max = float(wavelengths.mean()) * vsini_kms / _C_KMS
    mid = max(1, math.ceil(dl_max / dlam_mean))
    offsets = (np.arange(2 * mid + 1) - mid) * dlam_mean
    kernel = _rot_profile(offsets / dl_max, epsilon)
    kernel = kernel / kernel.sum()

    full = np.convolve(values, kernel[::-1], mode="full")
    return full[mid:mid + n]