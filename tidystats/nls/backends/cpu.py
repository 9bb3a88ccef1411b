"""
CPU backend for nonlinear least squares.

The optimization itself is delegated to scipy.optimize.least_squares
(Levenberg-Marquardt, or trust-region reflective when bounds are given).
This module turns scipy's answer into R's nls() quantities: the gradient
at the solution, the relative-offset convergence criterion and the
convergence flag.
"""

from __future__ import annotations

import warnings
from typing import Any, Callable
import numpy as np
from numpy.typing import NDArray
from scipy.optimize import least_squares, OptimizeResult

from tidystats.core.result import Result
from tidystats.core.compute.timing import Timer
from tidystats.core.compute.qr import QRResult, qr_cpu
from tidystats.core.exceptions import ConvergenceError, SingularMatrixError
from tidystats.nls._common import (
    ConvInfo,
    EVALS_PER_ITERATION,
    NLSControl,
    NLSParams,
)
from tidystats.nls.design import NLSDesign


Vector = NDArray[np.floating[Any]]

# Central differences: step ~ eps^(1/3) balances truncation and rounding error
_STEP = np.finfo(np.float64).eps ** (1.0 / 3.0)

# Relative rank tolerance for the gradient, as R's qr() default
GRADIENT_RANK_TOL = 1e-7


def numeric_gradient(f: Callable[[Vector], Vector], theta: Vector) -> NDArray[np.floating[Any]]:
    """
    Jacobian of f at theta by central differences, shape (n, p).
    """
    theta = np.asarray(theta, dtype=np.float64)
    columns = []
    for j in range(theta.shape[0]):
        h = _STEP * max(abs(theta[j]), 1.0)
        up = theta.copy()
        down = theta.copy()
        up[j] += h
        down[j] -= h
        columns.append((f(up) - f(down)) / (2.0 * h))
    return np.column_stack(columns)


def relative_offset(
    qr: QRResult,
    residuals: Vector,
    scale_offset: float = 0.0,
) -> float:
    """
    R's relative-offset convergence criterion.

    Ratio of the residual component inside the tangent plane to the
    component orthogonal to it. Zero at an exact least-squares solution.
    """
    n, p = qr.R.shape
    if p == 0:
        return 0.0
    rotated = qr.qty(residuals)
    inside = float(np.sum(rotated[:p] ** 2))
    outside = float(np.sum(rotated[p:] ** 2))
    offset = (n - p) * scale_offset ** 2
    denom = offset + outside
    if denom == 0.0:
        return 0.0 if inside == 0.0 else float("inf")
    return float(np.sqrt(inside / denom))


def run_least_squares(
    resid: Callable[[Vector], Vector],
    jac: Callable[[Vector], NDArray[np.floating[Any]]],
    theta0: Vector,
    lower: Vector,
    upper: Vector,
    control: NLSControl,
    algorithm: str,
) -> OptimizeResult:
    """Call scipy.optimize.least_squares with nls() iteration limits."""
    kwargs: dict[str, Any] = {
        'method': algorithm,
        'jac': jac,
        'xtol': 1e-10,
        'ftol': 1e-10,
        'gtol': 1e-10,
        'max_nfev': control.max_iter * EVALS_PER_ITERATION,
    }
    if algorithm != 'lm':
        kwargs['bounds'] = (lower, upper)
    return least_squares(resid, theta0, **kwargs)


class CPUNLSBackend:
    """
    CPU backend for nonlinear least squares.

    Implements the Backend pattern for NLSDesign -> NLSParams.
    """

    def __init__(self, algorithm: str = 'lm'):
        self._algorithm = algorithm

    @property
    def name(self) -> str:
        return f'cpu_{self._algorithm}'

    def solve(self, design: NLSDesign) -> Result[NLSParams]:
        """
        Fit the model by nonlinear least squares.

        Args:
            design: Validated NLS design

        Returns:
            Result containing NLSParams

        Raises:
            SingularMatrixError: If the gradient at the solution is rank-deficient
            ConvergenceError: If the fit does not converge and
                control.warn_only is False
        """
        timer = Timer()
        timer.start()
        control = design.control
        resid = design.residual_function()
        theta0 = np.array(list(design.start.values()))

        def jac(theta: Vector) -> NDArray[np.floating[Any]]:
            return -numeric_gradient(design.evaluate, theta)

        with timer.section('optimize'):
            sol = run_least_squares(
                resid, jac, theta0, design.lower, design.upper,
                control, self._algorithm,
            )

        theta = np.asarray(sol.x, dtype=np.float64)

        with timer.section('gradient'):
            fitted = design.evaluate(theta)
            residuals = design.y - fitted
            gradient = numeric_gradient(design.evaluate, theta)
            qr = qr_cpu(gradient, tol=GRADIENT_RANK_TOL)

        if qr.rank < design.p:
            raise SingularMatrixError(
                "singular gradient matrix at parameter estimates",
                matrix_name='gradient',
                rank=qr.rank,
                expected_rank=design.p,
            )

        fin_tol = relative_offset(qr, residuals, control.scale_offset)
        fin_iter = int(sol.njev) if sol.njev is not None else int(sol.nfev)
        is_conv = bool(sol.status > 0 and fin_tol <= control.tol)

        warnings_list: list[str] = []
        if not is_conv:
            reason = 'max_iterations' if sol.status == 0 else 'tolerance'
            msg = (
                f"nls did not converge after {fin_iter} iterations: "
                f"relative offset {fin_tol:.3g} (tol={control.tol:g}); {sol.message}"
            )
            if not control.warn_only:
                raise ConvergenceError(
                    msg,
                    iterations=fin_iter,
                    final_change=fin_tol,
                    reason=reason,
                    threshold=control.tol,
                )
            warnings.warn(msg, UserWarning, stacklevel=3)
            warnings_list.append(msg)

        timer.stop()

        rss = float(residuals @ residuals)
        params = NLSParams(
            coefficients=theta,
            gradient=gradient,
            fitted_values=fitted,
            residuals=residuals,
            rss=rss,
            df_residual=design.n - design.p,
            conv_info=ConvInfo(
                is_conv=is_conv,
                fin_iter=fin_iter,
                fin_tol=fin_tol,
                stop_code=int(sol.status),
                stop_message=str(sol.message),
            ),
        )

        info: dict[str, Any] = {
            'algorithm': self._algorithm,
            'converged': is_conv,
            'iterations': fin_iter,
            'nfev': int(sol.nfev),
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
