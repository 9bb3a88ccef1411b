"""
Core infrastructure for tidystats.

Shared abstractions used by every model family (nls, htest):
    protocols: NonlinearFit and Tidier structural interfaces
    result: Generic Result[P] envelope for fitted models
    exceptions: Exception hierarchy
    validation: Input validators
    table: Tidy table helpers (fix_data_frame, compact, one_row_frame)
"""

from tidystats.core.protocols import NonlinearFit, Tidier
from tidystats.core.result import Result
from tidystats.core.exceptions import (
    TidyStatsError,
    ValidationError,
    DimensionError,
    InvalidModelError,
    InvalidTestResultError,
    DimensionMismatchError,
    DataReconstructionError,
    NumericalError,
    IntervalComputationError,
    SingularMatrixError,
    ConvergenceError,
)

__all__ = [
    # Protocols
    "NonlinearFit",
    "Tidier",
    # Result
    "Result",
    # Exceptions
    "TidyStatsError",
    "ValidationError",
    "DimensionError",
    "InvalidModelError",
    "InvalidTestResultError",
    "DimensionMismatchError",
    "DataReconstructionError",
    "NumericalError",
    "IntervalComputationError",
    "SingularMatrixError",
    "ConvergenceError",
]
