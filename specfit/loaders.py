"""Readers for observed spectra stored as plain-text tables."""

from __future__ import annotations

import math
from collections.abc import Callable
from pathlib import Path

import numpy as np

from .snr import der_snr_curve, get_signal_to_noise_curve
from .spectrum import Spectrum

SpectrumLoader = Callable[[str | Path], Spectrum]

_NOISE_BOX_MIN = 700


def _read_table(path: str | Path, ncols: int, comment: str = "#") -> np.ndarray:
    """Rows of ``ncols`` numbers; blank, comment and unparsable lines are skipped."""
    if ncols not in (2, 3):
        raise ValueError("read_table: ncols must be 2 or 3")

    rows: list[list[float]] = []
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.lstrip()
            if not stripped or stripped.startswith(comment):
                continue
            tokens = stripped.split()
            if len(tokens) < ncols:
                continue
            try:
                rows.append([float(token) for token in tokens[:ncols]])
            except ValueError:
                continue
    if not rows:
        raise ValueError(f"File '{path}' contains no valid data")
    return np.array(rows, dtype=float)


def _sorted_by_wavelength(table: np.ndarray) -> np.ndarray:
    return table[np.argsort(table[:, 0], kind="stable")]


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _linear_interpolate(x_new: np.ndarray, x_old: np.ndarray, y_old: np.ndarray) -> np.ndarray:
    if x_old.size != y_old.size or x_old.size < 2:
        raise ValueError("linear_interpolate: invalid input table.")
    hi = np.clip(np.searchsorted(x_old, x_new, side="right"), 1, x_old.size - 1)
    lo = hi - 1
    with np.errstate(divide="ignore", invalid="ignore"):
        t = (x_new - x_old[lo]) / (x_old[hi] - x_old[lo])
    out = (1.0 - t) * y_old[lo] + t * y_old[hi]
    out = np.where(x_new <= x_old[0], y_old[0], out)
    return np.where(x_new >= x_old[-1], y_old[-1], out)


def load_ascii_2col(path: str | Path) -> Spectrum:
    """Read wavelength and flux columns and estimate the per-pixel noise.

    Rows are sorted by wavelength.  The noise is measured in windows of
    ``max(700, len/10)`` pixels, capped at ``len/4``: DER_SNR for windows of
    at most 700 pixels, neighbour differences for larger ones.  The window
    values, extended flat to both ends, are interpolated onto every pixel.
    """
    table = _sorted_by_wavelength(_read_table(path, 2))
    lam = table[:, 0].copy()
    flux = table[:, 1].copy()
    length = lam.size

    npix_box = max(_NOISE_BOX_MIN, _round_half_away(length / 10.0))
    npix_box = min(npix_box, _round_half_away(length / 4.0))

    if npix_box <= _NOISE_BOX_MIN:
        curve = der_snr_curve(lam, flux, npix_box)
    else:
        curve = get_signal_to_noise_curve(lam, flux, npix_box)

    x_old = np.concatenate(([lam[0]], curve.lam, [lam[-1]]))
    y_old = np.concatenate(([curve.noise[0]], curve.noise, [curve.noise[-1]]))
    sigma = _linear_interpolate(lam, x_old, y_old)
    return Spectrum(lam, flux, sigma)


def load_ascii_3col(path: str | Path) -> Spectrum:
    """Read wavelength, flux and error columns, sorted by wavelength."""
    table = _sorted_by_wavelength(_read_table(path, 3))
    return Spectrum(table[:, 0], table[:, 1], table[:, 2])


_LOADERS: dict[str, SpectrumLoader] = {
    "ASCII_with_3_columns": load_ascii_3col,
    "ASCII_with_2_columns": load_ascii_2col,
}


def load_spectrum(path: str | Path, format: str = "auto") -> Spectrum:
    """Load ``path`` with the reader registered for ``format``.

    ``"auto"`` tries every registered reader in turn and returns the first
    result that loads.
    """
    if format == "auto":
        for loader in _LOADERS.values():
            try:
                return loader(path)
            except (OSError, ValueError):
                continue
        raise ValueError(
            f"load_spectrum(auto): none of the registered readers could load '{path}'"
        )

    try:
        loader = _LOADERS[format]
    except KeyError:
        raise ValueError(f"Unsupported spectrum format: {format}") from None
    return loader(path)