"""
Tidiers for nonlinear least-squares fits.

    tidy_nls(x, conf_int=False, conf_level=0.95)
        One row per parameter: term, estimate, stderror, statistic, p.value
        (+ conf.low, conf.high).
    augment_nls(x, data=None)
        The original data with .fitted and .resid appended.
    glance_nls(x)
        One row: sigma, isConv, finTol.

Any object satisfying the NonlinearFit protocol can be tidied; NLSSolution
is the one this package produces.
"""

from __future__ import annotations

import warnings
from collections import Counter
from typing import Any, Mapping
import numpy as np
import pandas as pd

from tidystats.core.exceptions import (
    DataReconstructionError,
    DimensionMismatchError,
    IntervalComputationError,
    InvalidModelError,
    TidyStatsError,
    describe_type,
)
from tidystats.core.protocols import NonlinearFit
from tidystats.core.table import fix_data_frame, one_row_frame, unrowname
from tidystats.core.validation import check_conf_level


TIDY_COLUMNS = ("estimate", "stderror", "statistic", "p.value")
CONF_COLUMNS = ("conf.low", "conf.high")


def _check_model(x: Any) -> NonlinearFit:
    if not isinstance(x, NonlinearFit):
        raise InvalidModelError(
            f"expected a nonlinear least-squares fit, got {describe_type(x)}",
            model_type=describe_type(x),
        )
    return x


def _summary(x: NonlinearFit) -> Any:
    try:
        s = x.summary()
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise InvalidModelError(
            f"summary() failed for {describe_type(x)}: {e}",
            model_type=describe_type(x),
            missing='summary',
        ) from e
    if s is None:
        raise InvalidModelError(
            f"{describe_type(x)} has no summary",
            model_type=describe_type(x),
            missing='summary',
        )
    return s


def _coefficient_table(x: NonlinearFit) -> pd.DataFrame:
    table = getattr(_summary(x), 'coefficients', None)
    if table is None:
        raise InvalidModelError(
            f"{describe_type(x)} has no coefficient table",
            model_type=describe_type(x),
            missing='coefficients',
        )
    table = pd.DataFrame(table)
    if table.shape[1] != len(TIDY_COLUMNS):
        raise InvalidModelError(
            f"coefficient table has {table.shape[1]} columns, expected {len(TIDY_COLUMNS)}",
            model_type=describe_type(x),
            missing='coefficients',
        )
    return table


def _interval_table(x: NonlinearFit, conf_level: float, n_terms: int) -> pd.DataFrame:
    try:
        ci = x.confint(conf_level, verbose=False)
    except IntervalComputationError:
        raise
    except (TidyStatsError, ArithmeticError, ValueError, RuntimeError, np.linalg.LinAlgError) as e:
        raise IntervalComputationError(
            f"confidence interval computation failed: {e}", level=conf_level,
        ) from e
    ci = np.asarray(ci, dtype=np.float64)
    if ci.ndim == 1:
        ci = ci.reshape(1, -1)
    if ci.shape != (n_terms, 2):
        raise IntervalComputationError(
            f"confint returned shape {ci.shape}, expected ({n_terms}, 2)",
            level=conf_level,
        )
    return pd.DataFrame(ci, columns=list(CONF_COLUMNS))


def tidy_nls(
    x: NonlinearFit,
    conf_int: bool = False,
    conf_level: float = 0.95,
) -> pd.DataFrame:
    """
    Tidy the coefficients of a nonlinear fit.

    Args:
        x: Fitted model
        conf_int: Whether to append profile confidence limits
        conf_level: Confidence level, used only if conf_int is True

    Returns:
        DataFrame with one row per parameter and columns term, estimate,
        stderror, statistic, p.value (and conf.low, conf.high)

    Raises:
        InvalidModelError: If x has no coefficient table
        IntervalComputationError: If the confidence interval cannot be computed
    """
    x = _check_model(x)
    if conf_int:
        conf_level = check_conf_level(conf_level)
    ret = fix_data_frame(_coefficient_table(x), TIDY_COLUMNS)

    if conf_int:
        ci = _interval_table(x, conf_level, len(ret))
        ret = pd.concat([ret, ci], axis=1)
    return ret


def _reconstruct_data(x: NonlinearFit) -> pd.DataFrame:
    """
    Best-effort recovery of the fitting data from the model environment.

    Every environment variable that is not a parameter becomes a column.
    Scalars are repeated; vectors whose length differs from the most
    common length are dropped with a warning.
    """
    pars = set(x.get_pars())
    env = dict(x.get_env())
    candidates = {k: np.asarray(v) for k, v in env.items() if k not in pars}
    vectors = {k: v for k, v in candidates.items() if v.ndim == 1 and len(v) > 0}
    if not vectors:
        raise DataReconstructionError(
            "no data supplied and no non-parameter variables could be "
            "recovered from the model environment; pass data explicitly",
            available=tuple(env),
        )

    counts = Counter(len(v) for v in vectors.values())
    n = max(counts, key=lambda length: (counts[length], length))
    dropped = [k for k, v in candidates.items()
               if v.ndim > 1 or (v.ndim == 1 and len(v) != n)]
    if dropped:
        warnings.warn(
            f"augment: dropped environment variables {dropped} whose length "
            f"differs from {n} observations",
            UserWarning,
            stacklevel=3,
        )

    columns = {}
    for k, v in candidates.items():
        if k in dropped:
            continue
        columns[k] = np.repeat(v.item(), n) if v.ndim == 0 else v.copy()
    return pd.DataFrame(columns)


def _is_empty_data(data: Any) -> bool:
    if data is None:
        return True
    if isinstance(data, pd.DataFrame):
        return data.empty
    if isinstance(data, Mapping):
        return len(data) == 0
    return False


def _observation_vector(values: Any, n: int, source: str) -> np.ndarray:
    vec = np.array(values, dtype=np.float64).ravel()
    if vec.shape[0] != n:
        raise DimensionMismatchError(
            f"data has {n} rows but the model's {source} has length {vec.shape[0]}",
            expected=n,
            actual=vec.shape[0],
            source=source,
        )
    return vec


def augment_nls(x: NonlinearFit, data: Any = None) -> pd.DataFrame:
    """
    Augment the original data with fitted values and residuals.

    Args:
        x: Fitted model
        data: Data the model was fit on. If None, it is reconstructed from
            the model environment; this may not recover every column.

    Returns:
        The data (with a .rownames column if it had informative row labels)
        plus .fitted and .resid columns

    Raises:
        InvalidModelError: If x is not a nonlinear fit
        DataReconstructionError: If no data is given and none can be recovered
        DimensionMismatchError: If the data and the model disagree in length
    """
    x = _check_model(x)
    if _is_empty_data(data):
        ret = unrowname(_reconstruct_data(x))
    else:
        ret = fix_data_frame(data, newcol=".rownames")

    n = len(ret)
    ret[".fitted"] = _observation_vector(x.predict(), n, "fitted")
    ret[".resid"] = _observation_vector(x.residuals(), n, "residuals")
    return ret


def glance_nls(x: NonlinearFit) -> pd.DataFrame:
    """
    One-row summary of a nonlinear fit.

    Returns:
        DataFrame with columns sigma (residual standard error), isConv
        (convergence flag) and finTol (achieved convergence tolerance)

    Raises:
        InvalidModelError: If the model summary is unavailable
    """
    x = _check_model(x)
    s = _summary(x)
    conv = getattr(s, 'conv_info', None)
    if conv is None or not hasattr(s, 'sigma'):
        raise InvalidModelError(
            f"{describe_type(x)} summary lacks sigma or convergence info",
            model_type=describe_type(x),
            missing='conv_info' if conv is None else 'sigma',
        )
    return one_row_frame({
        'sigma': float(s.sigma),
        'isConv': bool(conv.is_conv),
        'finTol': float(conv.fin_tol),
    })


class NLSTidier:
    """Tidier capability set for nonlinear least-squares fits."""

    @property
    def kind(self) -> str:
        return "nls"

    def tidy(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        return tidy_nls(x, **kwargs)

    def augment(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        return augment_nls(x, **kwargs)

    def glance(self, x: Any) -> pd.DataFrame:
        return glance_nls(x)
