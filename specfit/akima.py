"""Modified Akima interpolation with linear extrapolation."""

from __future__ import annotations

import numpy as np


def _makima_slopes(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Node derivatives of the modified Akima interpolant."""
    delta = np.diff(y) / np.diff(x)
    left1 = 2.0 * delta[0] - delta[1]
    left2 = 2.0 * left1 - delta[0]
    right1 = 2.0 * delta[-1] - delta[-2]
    right2 = 2.0 * right1 - delta[-1]
    ext = np.concatenate(([left2, left1], delta, [right1, right2]))

    a, b, c, d = ext[:-3], ext[1:-2], ext[2:-1], ext[3:]
    w1 = np.abs(d - c) + 0.5 * np.abs(d + c)
    w2 = np.abs(b - a) + 0.5 * np.abs(b + a)
    den = w1 + w2
    with np.errstate(divide="ignore", invalid="ignore"):
        slopes = np.where(den == 0.0, 0.0, (w1 * b + w2 * c) / den)
    return slopes


class AkimaSpline:
    """Modified Akima spline through ``(x, y)``.

    Inside the abscissa range the cubic Hermite interpolant is used; outside
    it the spline continues as a straight line whose slope is a one-sided
    finite difference at the boundary.
    """

    _STEP = 1e-6

    def __init__(self, x, y) -> None:
        xs = np.array(x, dtype=float).reshape(-1)
        ys = np.array(y, dtype=float).reshape(-1)
        if xs.size != ys.size:
            raise ValueError("There must be the same number of ordinates as abscissas.")
        if xs.size < 4:
            raise ValueError("Must be at least four data points.")
        if np.any(np.diff(xs) <= 0.0):
            raise ValueError("Abscissas must be sorted in strictly increasing order.")

        self._x = xs
        self._y = ys
        self._dydx = _makima_slopes(xs, ys)

        self.x_min = float(xs.min())
        self.x_max = float(xs.max())
        h = self._STEP
        self._y_min = float(self._interior(np.asarray(self.x_min)))
        self._y_max = float(self._interior(np.asarray(self.x_max)))
        self._deriv_min = (float(self._interior(np.asarray(self.x_min + h))) - self._y_min) / h
        self._deriv_max = (self._y_max - float(self._interior(np.asarray(self.x_max - h)))) / h

    def _interior(self, t: np.ndarray) -> np.ndarray:
        x, y, d = self._x, self._y, self._dydx
        idx = np.clip(np.searchsorted(x, t, side="right") - 1, 0, x.size - 2)
        x0 = x[idx]
        h = x[idx + 1] - x0
        s = (t - x0) / h
        one_minus = 1.0 - s
        h00 = (1.0 + 2.0 * s) * one_minus * one_minus
        h10 = s * one_minus * one_minus
        h01 = s * s * (3.0 - 2.0 * s)
        h11 = s * s * (s - 1.0)
        return y[idx] * h00 + h * d[idx] * h10 + y[idx + 1] * h01 + h * d[idx + 1] * h11

    def __call__(self, x):
        """Evaluate at a scalar (returns a float) or an array of abscissas."""
        t = np.asarray(x, dtype=float)
        out = self._interior(t)
        out = np.where(t < self.x_min, self._y_min + self._deriv_min * (t - self.x_min), out)
        out = np.where(t > self.x_max, self._y_max + self._deriv_max * (t - self.x_max), out)
        if out.ndim == 0:
            return float(out)
        return out