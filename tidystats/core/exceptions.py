"""
Exception hierarchy for tidystats.

All exceptions inherit from TidyStatsError to allow catching any
library-specific error. Tidier failures are typed so callers can tell a
malformed model apart from a failed interval computation or an augment
call whose data does not line up with the fit.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from typing import Any


class TidyStatsError(Exception):
    """Base exception for all tidystats errors."""
    pass


class ValidationError(TidyStatsError):
    """
    Input validation failed.
    
    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.
    
    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class InvalidModelError(ValidationError):
    """
    Model object lacks the fields a tidier requires.

    Raised when a tidier receives an object of the wrong type, or a model
    whose coefficient table or summary is unavailable.

    Attributes:
        model_type: Name of the offending object's type
        missing: Name of the missing accessor or field, if known
    """

    def __init__(
        self,
        message: str,
        model_type: str | None = None,
        missing: str | None = None,
    ):
        super().__init__(message)
        self.model_type = model_type
        self.missing = missing


class InvalidTestResultError(ValidationError):
    """
    Hypothesis test result exposes none of the recognized fields.

    A zero-column table is never a valid tidy output, so a test result
    with no estimate, statistic, p-value or parameter is rejected.
    """
    pass


class DimensionMismatchError(DimensionError):
    """
    Augmentation data and model outputs disagree in length.

    Attributes:
        expected: Number of rows in the supplied or reconstructed data
        actual: Length of the fitted/residual vector
        source: Which model output disagreed ('fitted' or 'residuals')
    """

    def __init__(
        self,
        message: str,
        expected: int | None = None,
        actual: int | None = None,
        source: str | None = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.source = source


class DataReconstructionError(TidyStatsError):
    """
    Original data could not be recovered from the fit environment.

    Raised by augment when no data is supplied and the model's environment
    holds no non-parameter variables.

    Attributes:
        available: Names found in the fit environment
    """

    def __init__(self, message: str, available: tuple[str, ...] = ()):
        super().__init__(message)
        self.available = available


class NumericalError(TidyStatsError):
    """
    Numerical computation failed.
    
    Base class for errors arising from numerical issues during computation.
    """
    pass


class IntervalComputationError(NumericalError):
    """
    Confidence interval procedure failed or did not converge.

    Attributes:
        parameter: Parameter whose interval could not be computed, if known
        level: Requested confidence level
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        level: float | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.level = level


class SingularMatrixError(NumericalError):
    """
    Gradient matrix is singular or nearly singular.

    Raised when the Jacobian at the solution is rank-deficient, so the
    parameter covariance cannot be formed.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Expected rank (number of parameters)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class ConvergenceError(TidyStatsError):
    """
    Iterative algorithm failed to converge.
    
    Raised when the nonlinear least-squares fit fails to meet its
    convergence criterion within the maximum number of iterations.
    
    Attributes:
        iterations: Number of iterations completed
        final_change: Final convergence criterion value
        reason: Why convergence failed (e.g., 'max_iterations', 'step_factor')
        threshold: The convergence threshold that was not met
    """
    
    def __init__(
        self, 
        message: str, 
        iterations: int, 
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold


def describe_type(obj: Any) -> str:
    """Qualified type name used in error messages."""
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"
