"""
Core protocols for tidystats.

These define the structural interfaces between tidiers and the objects they
tidy. We use Protocol (structural typing) rather than ABC (nominal typing) so
any fitted-model object with the right accessors can be tidied, not only the
ones this package produces.

Design Principles:
    - Minimal contracts: prescribe only what the tidiers actually read
    - Capability sets: a Tidier is the trio {tidy, augment, glance}
    - Dispatch by explicit tag, never by isinstance chains
"""

from typing import Protocol, Any, Mapping, runtime_checkable

import numpy as np
import pandas as pd
from numpy.typing import NDArray


@runtime_checkable
class NonlinearFit(Protocol):
    """
    What the nonlinear least-squares tidiers need from a fitted model.

    Mirrors the accessors of R's nls objects:

        summary()        -> object with .coefficients (DataFrame indexed by
                            parameter name, four numeric columns), .sigma and
                            .conv_info (with .is_conv and .fin_tol)
        confint(level)   -> (p, 2) array, or a flat pair for one parameter
        get_pars()       -> parameter name -> estimate
        get_env()        -> every variable the model was evaluated in
        predict()        -> fitted values, one per observation
        residuals()      -> residuals, one per observation
    """

    def summary(self) -> Any:
        ...

    def confint(self, level: float = 0.95, *, verbose: bool = True) -> NDArray[np.floating[Any]]:
        ...

    def get_pars(self) -> Mapping[str, float]:
        ...

    def get_env(self) -> Mapping[str, Any]:
        ...

    def predict(self) -> NDArray[np.floating[Any]]:
        ...

    def residuals(self) -> NDArray[np.floating[Any]]:
        ...


@runtime_checkable
class Tidier(Protocol):
    """
    Capability set implemented once per supported model family.

    Every method returns a fresh pandas DataFrame with a default RangeIndex.
    Families that have no per-observation view raise InvalidModelError
    from augment().
    """

    @property
    def kind(self) -> str:
        """Tag this tidier is registered under (e.g. 'nls', 'htest')."""
        ...

    def tidy(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        ...

    def augment(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        ...

    def glance(self, x: Any) -> pd.DataFrame:
        ...
