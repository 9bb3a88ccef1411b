"""
NLSDesign: validated inputs for a nonlinear least-squares fit.

The model is an ordinary Python callable. Its keyword parameters are
resolved against ``start`` (parameters to estimate) and ``data``
(variables to evaluate at). Immutable after construction.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Mapping
import numpy as np
from numpy.typing import NDArray

from tidystats.core.exceptions import DimensionError, ValidationError
from tidystats.core.table import as_data_frame
from tidystats.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_min_samples,
)
from tidystats.nls._common import NLSControl, VALID_ALGORITHMS


ModelFunction = Callable[..., Any]


def _model_arguments(model: ModelFunction) -> list[inspect.Parameter]:
    try:
        sig = inspect.signature(model)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"model: cannot inspect signature: {e}") from e
    return [
        p for p in sig.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD,
                      inspect.Parameter.KEYWORD_ONLY)
    ]


def _as_variable(value: Any, name: str) -> NDArray[np.floating[Any]] | float:
    arr = check_array(value, name)
    if arr.ndim == 0:
        return float(arr)
    check_1d(arr, name)
    check_finite(arr, name)
    return arr


def _bounds(
    bounds: Mapping[str, float] | None,
    names: tuple[str, ...],
    fill: float,
    label: str,
) -> NDArray[np.floating[Any]]:
    out = np.full(len(names), fill, dtype=np.float64)
    if bounds is None:
        return out
    unknown = set(bounds) - set(names)
    if unknown:
        raise ValidationError(
            f"{label}: unknown parameters {sorted(unknown)}; expected a subset of {list(names)}"
        )
    for i, name in enumerate(names):
        if name in bounds:
            out[i] = float(bounds[name])
    return out


@dataclass(frozen=True)
class NLSDesign:
    """
    Design for a nonlinear least-squares fit.

    Do not construct directly; use NLSDesign.build().

    Attributes:
        model: Callable evaluated as model(**variables, **parameters)
        response: Name of the response variable
        y: Response vector, shape (n,)
        variables: Data variables the model reads (arrays of length n, or scalars)
        start: Starting values, in parameter order
        lower, upper: Bounds per parameter (-inf/inf when unbounded)
        control: Iteration control
        algorithm: 'lm' (Levenberg-Marquardt) or 'trf' (bounded)
    """
    model: ModelFunction
    response: str
    y: NDArray[np.floating[Any]]
    variables: dict[str, Any]
    start: dict[str, float]
    lower: NDArray[np.floating[Any]]
    upper: NDArray[np.floating[Any]]
    control: NLSControl
    algorithm: str

    @classmethod
    def build(
        cls,
        model: ModelFunction,
        data: Any,
        start: Mapping[str, float],
        *,
        response: str,
        lower: Mapping[str, float] | None = None,
        upper: Mapping[str, float] | None = None,
        control: NLSControl | None = None,
        algorithm: str = "lm",
    ) -> 'NLSDesign':
        """
        Validate inputs and resolve model arguments.

        Raises:
            ValidationError: If the model, data or start values are invalid
            DimensionError: If variables or model output have the wrong length
        """
        if not callable(model):
            raise ValidationError(f"model: expected a callable, got {type(model).__name__}")
        if algorithm not in VALID_ALGORITHMS:
            raise ValidationError(
                f"algorithm must be one of {VALID_ALGORITHMS}, got {algorithm!r}"
            )
        if not start:
            raise ValidationError("start: at least one parameter is required")
        if control is None:
            control = NLSControl()

        frame = as_data_frame(data)
        if response not in frame.columns:
            raise ValidationError(
                f"response: {response!r} not found in data columns {list(frame.columns)}"
            )

        start_values = {str(k): float(v) for k, v in start.items()}
        clash = set(start_values) & set(map(str, frame.columns))
        if clash:
            raise ValidationError(
                f"start: parameter names {sorted(clash)} also appear as data columns"
            )

        y = check_array(frame[response].to_numpy(), response)
        check_1d(y, response)
        check_finite(y, response)
        n = y.shape[0]

        variables: dict[str, Any] = {}
        for arg in _model_arguments(model):
            if arg.name in start_values:
                continue
            if arg.name in frame.columns:
                value = _as_variable(frame[arg.name].to_numpy(), arg.name)
                variables[arg.name] = value
            elif arg.default is inspect.Parameter.empty:
                raise ValidationError(
                    f"model: argument {arg.name!r} is neither a parameter in start "
                    f"nor a column of data"
                )

        unused = set(start_values) - {a.name for a in _model_arguments(model)}
        if unused:
            raise ValidationError(
                f"start: parameters {sorted(unused)} are not arguments of the model"
            )

        names = tuple(start_values)
        p = len(names)
        check_min_samples(y, p, response)
        lo = _bounds(lower, names, -np.inf, "lower")
        hi = _bounds(upper, names, np.inf, "upper")
        if np.any(lo >= hi):
            raise ValidationError("lower bounds must be strictly below upper bounds")
        if algorithm == "lm" and (np.any(np.isfinite(lo)) or np.any(np.isfinite(hi))):
            raise ValidationError("bounds require algorithm='trf'")
        theta0 = np.array([start_values[k] for k in names])
        if np.any(theta0 < lo) or np.any(theta0 > hi):
            raise ValidationError("start values must lie within the bounds")

        design = cls(
            model=model,
            response=response,
            y=y,
            variables=variables,
            start=start_values,
            lower=lo,
            upper=hi,
            control=control,
            algorithm=algorithm,
        )

        fitted = design.evaluate(theta0)
        if fitted.shape != (n,):
            raise DimensionError(
                f"model: returned shape {fitted.shape} at the start values, "
                f"expected ({n},) to match {response!r}"
            )
        if not np.all(np.isfinite(fitted)):
            raise ValidationError("model: non-finite values at the start values")
        return design

    @property
    def n(self) -> int:
        return self.y.shape[0]

    @property
    def p(self) -> int:
        return len(self.start)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(self.start)

    def evaluate(
        self,
        theta: NDArray[np.floating[Any]],
        variables: Mapping[str, Any] | None = None,
    ) -> NDArray[np.floating[Any]]:
        """Model values at parameter vector theta (optionally at other data)."""
        kwargs = dict(self.variables if variables is None else variables)
        kwargs.update(zip(self.param_names, (float(t) for t in theta)))
        out = np.asarray(self.model(**kwargs), dtype=np.float64)
        if out.ndim == 0:
            n = self.n if variables is None else _common_length(variables, self.n)
            out = np.full(n, float(out))
        return out

    def residual_function(self) -> Callable[[NDArray[np.floating[Any]]], NDArray[np.floating[Any]]]:
        """theta -> y - f(theta), the vector least_squares minimizes."""
        y = self.y

        def resid(theta: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
            return y - self.evaluate(theta)

        return resid


def _common_length(variables: Mapping[str, Any], default: int) -> int:
    for value in variables.values():
        arr = np.asarray(value)
        if arr.ndim == 1:
            return arr.shape[0]
    return default
