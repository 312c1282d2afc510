"""Bounded Levenberg-Marquardt least squares over a subset of parameters."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

ResidualFunction = Callable[[np.ndarray, bool], tuple[np.ndarray, np.ndarray]]


@dataclass
class LMSolverOptions:
    """Solver settings; a tolerance or lambda of at most 0 is chosen automatically."""

    max_iterations: int = 200
    gradient_tolerance: float = 0.0
    step_tolerance: float = 0.0
    chi2_tolerance: float = 0.0
    initial_lambda: float = 0.0
    verbose: bool = False


@dataclass(eq=False)
class LMSolverSummary:
    """Outcome of a fit: final parameters, chi-square and 1-sigma errors (0 = fixed)."""

    x: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float))
    iterations: int = 0
    initial_chi2: float = 0.0
    final_chi2: float = 0.0
    converged: bool = False
    param_uncertainties: list[float] = field(default_factory=list)


def _evaluate(func: ResidualFunction, x: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    r, jac = func(x, True)
    r = np.asarray(r, dtype=float).reshape(-1)
    jac = np.asarray(jac, dtype=float).reshape(r.size, x.size)
    return r, jac


def _solve(matrix: np.ndarray, rhs: np.ndarray) -> np.ndarray | None:
    try:
        return np.linalg.solve(matrix, rhs)
    except np.linalg.LinAlgError:
        return None


def levenberg_marquardt(
    func: ResidualFunction,
    x: Sequence[float] | np.ndarray,
    free_mask: Sequence[bool] | None = None,
    lower: Sequence[float] | None = None,
    upper: Sequence[float] | None = None,
    options: LMSolverOptions | None = None,
) -> LMSolverSummary:
    """Minimise the squared residuals of ``func`` starting from ``x``.

    ``func(p, True)`` returns the residual vector and the full Jacobian.
    Only parameters flagged in ``free_mask`` (all, if it is empty) move;
    trial points are clipped to ``lower``/``upper`` when given.  The input
    ``x`` is not modified; the result is in the summary.
    """
    opt = LMSolverOptions(**vars(options)) if options is not None else LMSolverOptions()
    x = np.array(x, dtype=float).reshape(-1)
    n = x.size
    summary = LMSolverSummary(x=x.copy())

    mask = np.ones(n, dtype=bool) if not free_mask else np.asarray(free_mask, dtype=bool)
    if mask.size != n:
        raise ValueError("levenberg_marquardt: free mask and parameters differ in size")
    free = np.flatnonzero(mask)
    n_free = free.size
    if n_free == 0:
        summary.converged = True
        summary.final_chi2 = 0.0
        return summary

    lo_bound = np.asarray(lower, dtype=float) if lower is not None and len(lower) else None
    hi_bound = np.asarray(upper, dtype=float) if upper is not None and len(upper) else None

    r, jac = _evaluate(func, x)
    m = r.size
    chi2 = float(r @ r)
    summary.initial_chi2 = chi2

    g0 = jac.T @ r
    gmax0 = float(np.max(np.abs(g0))) if g0.size else 0.0
    eps = sys.float_info.epsilon

    if opt.gradient_tolerance <= 0.0:
        opt.gradient_tolerance = 1e-4 * max(1.0, gmax0)
    if opt.step_tolerance <= 0.0:
        opt.step_tolerance = 1e-6 * (1.0 + float(np.max(np.abs(x))))
    if opt.chi2_tolerance <= 0.0:
        opt.chi2_tolerance = 1e-8 * max(1.0, chi2)
    if opt.initial_lambda <= 0.0:
        diag0 = np.sum(jac * jac, axis=0)
        opt.initial_lambda = 1e-3 * float(diag0.max()) if diag0.size else 0.0
        if opt.initial_lambda == 0.0:
            opt.initial_lambda = 1e-3
    lam = opt.initial_lambda

    for it in range(opt.max_iterations):
        summary.iterations = it + 1

        jf = jac[:, free]
        g = jf.T @ r
        if float(np.max(np.abs(g))) < opt.gradient_tolerance:
            summary.converged = True
            break

        jtj = jf.T @ jf
        diag = np.diag(jtj).copy()
        damped = jtj + np.diag(lam * (diag + 1e-20))
        solution = _solve(damped, g)
        if solution is None or not np.all(np.isfinite(solution)):
            break
        dx_free = -solution

        dx = np.zeros(n, dtype=float)
        dx[free] = dx_free
        if float(np.max(np.abs(dx))) < opt.step_tolerance:
            summary.converged = True
            break

        x_try = x + dx
        if lo_bound is not None:
            x_try = np.maximum(x_try, lo_bound)
        if hi_bound is not None:
            x_try = np.minimum(x_try, hi_bound)

        r_try, jac_try = _evaluate(func, x_try)
        chi2_try = float(r_try @ r_try)

        pred_red = 0.5 * float(dx_free @ (lam * diag * dx_free - g))
        if pred_red <= 0.0:
            pred_red = eps
        rho = (chi2 - chi2_try) / pred_red

        if rho > 0.0 and chi2_try < chi2:
            x, r, jac, chi2 = x_try, r_try, jac_try, chi2_try
            lam *= max(1.0 / 3.0, 1.0 - (2.0 * rho - 1.0) ** 3)
            lam = max(lam, 1e-18)
            if opt.verbose:
                print(f"[LM]  iter {it}  rho={rho:g}  chi2={chi2:g}  lambda={lam:g}  (accepted)")
            if abs(pred_red) < opt.chi2_tolerance:
                summary.converged = True
                break
        else:
            lam *= 2.0
            if opt.verbose:
                print(f"[LM]  iter {it}  rho={rho:g}  chi2={chi2_try:g}  lambda={lam:g}  (rejected)")

    summary.x = x
    summary.final_chi2 = chi2

    jf = jac[:, free]
    jtj = jf.T @ jf
    dof = max(m - n_free, 1)
    variance = float(r @ r) / dof
    cov = _solve(jtj, np.eye(n_free))
    if cov is None:
        cov = np.linalg.pinv(jtj)
    cov = cov * variance

    uncertainties = np.zeros(n, dtype=float)
    variances = np.diag(cov)
    with np.errstate(invalid="ignore"):
        uncertainties[free] = np.sqrt(np.where(variances > 0.0, variances, 0.0))
    summary.param_uncertainties = uncertainties.tolist()
    return summary