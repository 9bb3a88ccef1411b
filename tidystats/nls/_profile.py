"""
Confidence intervals for nonlinear least-squares parameters.

Two methods, matching what R users reach for:

    profile: profile-t intervals as in MASS::confint.nls. Each parameter is
             held fixed over a grid while the others are refitted; the
             interval ends where the signed root statistic
             tau(b) = sign(b - b_hat) * sqrt(RSS(b) - RSS_hat) / sigma
             crosses the t quantiles.
    wald:    estimate +/- t quantile * standard error.

Profiling refits the model many times. Its progress message goes to the
module logger at INFO when verbose, DEBUG otherwise.
"""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats
from scipy.optimize import brentq

from tidystats.core.compute.tolerances import NLS_PROFILE
from tidystats.core.exceptions import IntervalComputationError, ValidationError
from tidystats.nls.backends.cpu import numeric_gradient, run_least_squares

if TYPE_CHECKING:
    from tidystats.nls.solution import NLSSolution


logger = logging.getLogger(__name__)

VALID_METHODS = ("profile", "wald")

PROFILE_MESSAGE = "Waiting for profiling to be done..."

# Search outward in multiples of the standard error, doubling each time
_MAX_SEARCH_STEPS = 12


def conf_int(
    fit: 'NLSSolution',
    level: float,
    method: str = "profile",
    verbose: bool = True,
) -> NDArray[np.floating[Any]]:
    """
    Confidence limits for every parameter of a fitted model.

    Returns:
        Array of shape (p, 2) with lower and upper limits, or a flat pair
        of shape (2,) when the model has a single parameter (the shape R's
        confint.nls returns).

    Raises:
        ValidationError: If method is unknown
        IntervalComputationError: If a profile cannot be traced
    """
    if method not in VALID_METHODS:
        raise ValidationError(
            f"method must be one of {VALID_METHODS}, got {method!r}"
        )
    if fit.df_residual <= 0:
        raise IntervalComputationError(
            "no residual degrees of freedom, intervals are undefined",
            level=level,
        )

    alpha = (1.0 - level) / 2.0
    cutoff = float(sp_stats.t.ppf(1.0 - alpha, fit.df_residual))

    if method == "wald":
        est = fit.coefficients
        half = cutoff * fit.standard_errors
        ci = np.column_stack([est - half, est + half])
    else:
        logger.log(logging.INFO if verbose else logging.DEBUG, PROFILE_MESSAGE)
        ci = np.array([
            _profile_limits(fit, j, cutoff, level)
            for j in range(len(fit.coefficients))
        ])

    if ci.shape[0] == 1:
        return ci[0]
    return ci


class _Profiler:
    """RSS of the model with parameter j held at a given value."""

    def __init__(self, fit: 'NLSSolution', j: int, level: float):
        design = fit.design
        self._design = design
        self._fit = fit
        self._j = j
        self._level = level
        self._free = [k for k in range(design.p) if k != j]
        self._theta_hat = fit.coefficients.copy()
        self._warm = self._theta_hat[self._free].copy()

    def _full(self, b: float, free_values: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        theta = self._theta_hat.copy()
        theta[self._j] = b
        theta[self._free] = free_values
        return theta

    def rss(self, b: float) -> float:
        design = self._design
        name = design.param_names[self._j]
        if not self._free:
            r = design.y - design.evaluate(np.array([b]))
            return float(r @ r)

        def resid(free_values):
            return design.y - design.evaluate(self._full(b, free_values))

        def jac(free_values):
            return -numeric_gradient(
                lambda v: design.evaluate(self._full(b, v)), free_values
            )

        lower = design.lower[self._free]
        upper = design.upper[self._free]
        warm = np.clip(self._warm, lower, upper)
        try:
            sol = run_least_squares(
                resid, jac, warm, lower, upper, design.control, design.algorithm,
            )
        except (ValueError, np.linalg.LinAlgError) as e:
            raise IntervalComputationError(
                f"profiling {name!r}: refit at {b:.6g} failed: {e}",
                parameter=name,
                level=self._level,
            ) from e
        if sol.status <= 0 or not np.all(np.isfinite(sol.fun)):
            raise IntervalComputationError(
                f"profiling {name!r}: refit at {b:.6g} did not converge ({sol.message})",
                parameter=name,
                level=self._level,
            )
        self._warm = np.asarray(sol.x, dtype=np.float64)
        return float(sol.fun @ sol.fun)

    def tau(self, b: float) -> float:
        fit = self._fit
        delta = b - self._theta_hat[self._j]
        excess = max(self.rss(b) - fit.deviance, 0.0)
        return float(np.sign(delta) * np.sqrt(excess) / fit.sigma)


def _profile_limits(
    fit: 'NLSSolution',
    j: int,
    cutoff: float,
    level: float,
) -> tuple[float, float]:
    """Lower and upper profile-t limits for parameter j."""
    design = fit.design
    name = design.param_names[j]
    est = float(fit.coefficients[j])
    se = float(fit.standard_errors[j])
    if not np.isfinite(se) or se <= 0 or fit.sigma <= 0:
        raise IntervalComputationError(
            f"profiling {name!r}: standard error is not positive",
            parameter=name,
            level=level,
        )

    limits = []
    for direction in (-1.0, 1.0):
        profiler = _Profiler(fit, j, level)
        bound = design.lower[j] if direction < 0 else design.upper[j]
        target = direction * cutoff

        def g(b: float) -> float:
            return profiler.tau(b) - target

        inner = est
        outer = None
        step = se
        for _ in range(_MAX_SEARCH_STEPS):
            candidate = est + direction * step
            if direction * (candidate - bound) >= 0:
                candidate = bound
            value = g(candidate)
            if value * direction >= 0:
                outer = candidate
                break
            if candidate == bound:
                break
            inner = candidate
            step *= 2.0

        if outer is None:
            raise IntervalComputationError(
                f"profiling {name!r}: profile does not reach the "
                f"{level:.0%} cutoff on the {'lower' if direction < 0 else 'upper'} side",
                parameter=name,
                level=level,
            )
        try:
            root = brentq(
                g, min(inner, outer), max(inner, outer),
                xtol=NLS_PROFILE.atol * se,
                rtol=NLS_PROFILE.rtol * 1e-3,
            )
        except (ValueError, RuntimeError) as e:
            raise IntervalComputationError(
                f"profiling {name!r}: root finding failed: {e}",
                parameter=name,
                level=level,
            ) from e
        limits.append(float(root))

    return limits[0], limits[1]
