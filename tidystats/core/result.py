"""
Generic result container for tidystats computations.

Fitting collaborators (currently the nonlinear least-squares backend) return
their payload inside this envelope so that timing, convergence metadata and
non-fatal warnings travel with the numbers.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (converged, iterations, stop message)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) so tidiers can read a result repeatedly
      and always get the same tables
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for fitted models.
    
    Type Parameters:
        P: The domain-specific parameter payload type
        
    Attributes:
        params: Domain-specific parameters (coefficients, residuals, etc.)
        info: Structured metadata (algorithm, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        
    Examples:
        >>> Result(
        ...     params=NLSParams(...),
        ...     info={'algorithm': 'lm', 'converged': True, 'iterations': 7},
        ...     timing={'total_seconds': 0.01, 'optimize': 0.008},
        ...     backend_name='cpu_lm'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
