"""Continuum spline model, anchor placement and linear interpolation."""

from __future__ import annotations

import sys
from collections.abc import Iterable

import numpy as np

from .akima import AkimaSpline
from .spectrum import Spectrum


class ContinuumModel:
    """Multiplicative continuum given by an Akima spline through anchor points."""

    def __init__(self, anchors_x, anchors_y) -> None:
        self.x = np.array(anchors_x, dtype=float).reshape(-1)
        self.y = np.array(anchors_y, dtype=float).reshape(-1)
        self._spline = AkimaSpline(self.x, self.y)

    def evaluate(self, lam):
        """Continuum values at the wavelengths ``lam``."""
        return self._spline(np.asarray(lam, dtype=float))

    def update_y(self, new_y) -> None:
        """Replace the anchor ordinates and rebuild the spline."""
        self.y = np.array(new_y, dtype=float).reshape(-1)
        self._spline = AkimaSpline(self.x, self.y)


def anchors_from_intervals(
    intervals: Iterable[tuple[float, float, float]], spectrum: Spectrum
) -> np.ndarray:
    """Place continuum anchors from ``(start, end, step)`` triples.

    Two boundary anchors come first: the 10th and 10th-from-last used
    wavelength when at least 20 pixels are used, otherwise the first and
    last used wavelength.  Each triple then contributes ``start, start+step,
    ...`` up to ``end`` (and ``end`` itself), restricted to the range of used
    wavelengths.  The result is sorted and free of duplicates.
    """
    used = np.sort(spectrum.lam[spectrum.ignoreflag == 1])
    xs: list[float] = []

    if used.size >= 20:
        xs.extend([float(used[9]), float(used[-10])])
    elif used.size > 0:
        xs.extend([float(used[0]), float(used[-1])])

    lo_lim = float(used[0]) if used.size else sys.float_info.max
    hi_lim = float(used[-1]) if used.size else -sys.float_info.max

    for lo, hi, step in intervals:
        lo, hi, step = float(lo), float(hi), float(step)
        if hi < lo or step <= 0:
            continue
        x = lo
        while x <= hi + 1e-6:
            if lo_lim <= x <= hi_lim:
                xs.append(x)
            x += step
        if xs and xs[-1] < hi - 1e-6 and lo_lim <= hi <= hi_lim:
            xs.append(hi)

    return np.unique(np.array(xs, dtype=float))


def interp_linear(x_in, y_in, x_out) -> np.ndarray:
    """Linear interpolation of ``y_in(x_in)`` at ascending ``x_out``.

    Values at or below the first abscissa take the first ordinate; from the
    first output point at or beyond the last abscissa on, every remaining
    output takes the last ordinate.  Segments narrower than 1e-12 have zero
    slope.
    """
    xi = np.asarray(x_in, dtype=float).reshape(-1)
    yi = np.asarray(y_in, dtype=float).reshape(-1)
    xo = np.asarray(x_out, dtype=float).reshape(-1)
    if xi.size == 0:
        raise ValueError("interp_linear: empty input table")

    out = np.empty(xo.size, dtype=float)
    if xo.size == 0:
        return out

    dx = np.diff(xi)
    small = np.abs(dx) < 1e-12
    with np.errstate(divide="ignore", invalid="ignore"):
        slope = np.where(small, 0.0, np.diff(yi) / np.where(small, 1.0, dx))

    above_first = xo > xi[0]
    n_left = int(np.argmax(above_first)) if above_first.any() else xo.size
    out[:n_left] = yi[0]

    rest = xo[n_left:]
    beyond = rest >= xi[-1]
    n_mid = int(np.argmax(beyond)) if beyond.any() else rest.size
    out[n_left + n_mid:] = yi[-1]

    mid = rest[:n_mid]
    if mid.size:
        seg = np.searchsorted(xi, mid, side="left") - 1
        seg = np.maximum.accumulate(np.maximum(seg, 0))
        out[n_left:n_left + n_mid] = yi[seg] + slope[seg] * (mid - xi[seg])
    return out