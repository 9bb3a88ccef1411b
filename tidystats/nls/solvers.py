"""
Solver dispatch for nonlinear least squares.

Provides the R-named fitting function nls(). The fit is delegated to
scipy.optimize.least_squares; this module validates inputs, selects the
backend and wraps the result.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from tidystats.nls._common import NLSControl
from tidystats.nls.backends.cpu import CPUNLSBackend
from tidystats.nls.design import ModelFunction, NLSDesign
from tidystats.nls.solution import NLSSolution


AlgorithmChoice = Literal['lm', 'trf']


def nls(
    model: ModelFunction,
    data: Any,
    start: Mapping[str, float],
    *,
    response: str,
    lower: Mapping[str, float] | None = None,
    upper: Mapping[str, float] | None = None,
    control: NLSControl | None = None,
    algorithm: AlgorithmChoice | None = None,
) -> NLSSolution:
    """
    Nonlinear least squares. Mirrors R nls().

    Parameters
    ----------
    model : callable
        Model function. Its arguments are matched by name: names found in
        ``start`` are parameters, names found in ``data`` are variables.
        Must return one value per observation.
    data : DataFrame or mapping
        Data holding the response and the model's variables.
    start : mapping
        Starting values. Their order defines the parameter order.
    response : str
        Name of the response column in ``data``.
    lower, upper : mapping or None
        Optional parameter bounds (by name). Require algorithm 'trf'.
    control : NLSControl or None
        Iteration control (R's nls.control). Default NLSControl().
    algorithm : str or None
        'lm' (Levenberg-Marquardt) or 'trf' (trust-region reflective).
        Default 'lm', or 'trf' when bounds are given.

    Returns
    -------
    NLSSolution

    Raises
    ------
    ValidationError
        If the model, data or start values are invalid.
    SingularMatrixError
        If the gradient at the estimates is rank-deficient.
    ConvergenceError
        If the fit does not converge (unless control.warn_only).

    Examples
    --------
    >>> def michaelis_menten(conc, Vm, K):
    ...     return Vm * conc / (K + conc)
    >>> fit = nls(michaelis_menten, puromycin, {"Vm": 200, "K": 0.1},
    ...           response="rate")
    >>> fit.get_pars()
    {'Vm': 212.68..., 'K': 0.0641...}
    """
    if algorithm is None:
        algorithm = 'trf' if (lower or upper) else 'lm'

    design = NLSDesign.build(
        model, data, start,
        response=response,
        lower=lower,
        upper=upper,
        control=control,
        algorithm=algorithm,
    )

    backend = CPUNLSBackend(algorithm=design.algorithm)
    result = backend.solve(design)
    return NLSSolution(_result=result, _design=design)
