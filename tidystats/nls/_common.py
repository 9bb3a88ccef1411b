"""
Common types for nonlinear least squares.

Defines NLSParams (the backend payload), ConvInfo (maps to R's
nls()$convInfo) and NLSControl (maps to R's nls.control()).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from tidystats.core.exceptions import ValidationError


VALID_ALGORITHMS = ("lm", "trf")

# scipy counts function evaluations, not iterations; a Levenberg-Marquardt
# iteration can reject several trial steps before one is accepted.
EVALS_PER_ITERATION = 10


@dataclass(frozen=True)
class NLSControl:
    """
    Iteration control for nls(). Mirrors R's nls.control().

    Attributes
    ----------
    max_iter : int
        Maximum number of iterations. Default 50.
    tol : float
        Relative-offset convergence tolerance. Default 1e-5.
    warn_only : bool
        If True, a fit that fails to converge is returned (with
        ``is_conv=False`` and a warning) instead of raising.
    scale_offset : float
        Constant added to the denominator of the relative-offset
        criterion, for zero-residual data. Default 0.
    """
    max_iter: int = 50
    tol: float = 1e-5
    warn_only: bool = False
    scale_offset: float = 0.0

    def __post_init__(self) -> None:
        if self.max_iter < 1:
            raise ValidationError(f"max_iter must be >= 1, got {self.max_iter}")
        if not self.tol > 0:
            raise ValidationError(f"tol must be > 0, got {self.tol}")
        if self.scale_offset < 0:
            raise ValidationError(
                f"scale_offset must be >= 0, got {self.scale_offset}"
            )


@dataclass(frozen=True)
class ConvInfo:
    """
    Convergence diagnostics. Maps to R's nls()$convInfo.

    Attributes
    ----------
    is_conv : bool
        Whether the fit converged.
    fin_iter : int
        Number of iterations (Jacobian evaluations) performed.
    fin_tol : float
        Relative-offset convergence criterion at the solution.
    stop_code : int
        scipy.optimize.least_squares status code.
    stop_message : str
        Human-readable reason the iteration stopped.
    """
    is_conv: bool
    fin_iter: int
    fin_tol: float
    stop_code: int
    stop_message: str


@dataclass(frozen=True)
class NLSParams:
    """
    Parameter payload for a nonlinear least-squares fit.

    This is the immutable data computed by backends.
    """
    coefficients: NDArray[np.floating[Any]]
    gradient: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    rss: float
    df_residual: int
    conv_info: ConvInfo
