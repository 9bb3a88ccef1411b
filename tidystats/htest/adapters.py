"""
Adapters from foreign hypothesis test results to HTestResult.

    from_mapping(d)   R-style field bag: 'estimate', 'statistic', 'p.value',
                      'parameter', 'conf.int', 'method' (all optional)
    from_scipy(res)   scipy.stats result objects (statistic, pvalue, and
                      where available df and confidence_interval())
    as_htest(x)       whichever of the above applies
"""

from __future__ import annotations

from typing import Any, Mapping
import numpy as np

from tidystats.core.exceptions import InvalidTestResultError, describe_type
from tidystats.htest._common import Estimate, HTestResult, TestKind


_MAPPING_KEYS = {
    "estimate": "estimate",
    "statistic": "statistic",
    "p.value": "p_value",
    "p_value": "p_value",
    "parameter": "parameter",
    "conf.int": "conf_int",
    "conf_int": "conf_int",
    "conf.level": "conf_level",
    "conf_level": "conf_level",
    "method": "method",
    "kind": "kind",
    "null.value": "null_value",
    "alternative": "alternative",
    "data.name": "data_name",
}


def from_mapping(fields: Mapping[str, Any]) -> HTestResult:
    """
    Build an HTestResult from an R-style htest field bag.

    Unknown keys are ignored; missing keys are absent fields.
    """
    kwargs: dict[str, Any] = {}
    for key, value in fields.items():
        target = _MAPPING_KEYS.get(key)
        if target is not None and value is not None:
            kwargs[target] = value
    if isinstance(kwargs.get("kind"), str):
        kwargs["kind"] = TestKind(kwargs["kind"])
    return HTestResult(**kwargs)


def from_scipy(
    result: Any,
    *,
    estimate: Estimate | None = None,
    method: str | None = None,
    kind: TestKind | None = None,
    conf_level: float | None = None,
) -> HTestResult:
    """
    Adapt a scipy.stats test result.

    scipy results carry the statistic and p-value, and for t-tests the
    degrees of freedom and a confidence_interval() method; they do not
    carry the estimate or a method label, so pass those explicitly.

    Args:
        result: Result of e.g. scipy.stats.ttest_1samp or ttest_ind
        estimate: Point estimate(s) to report
        method: Method label
        kind: Explicit test kind
        conf_level: If given and the result supports it, the confidence
            interval at this level is included

    Raises:
        InvalidTestResultError: If result has no p-value
    """
    if not hasattr(result, "pvalue"):
        raise InvalidTestResultError(
            f"{describe_type(result)} is not a scipy test result (no pvalue)"
        )
    df = getattr(result, "df", None)
    conf_int = None
    if conf_level is not None and callable(getattr(result, "confidence_interval", None)):
        ci = result.confidence_interval(confidence_level=conf_level)
        conf_int = (float(ci.low), float(ci.high))

    statistic = getattr(result, "statistic", None)
    return HTestResult(
        estimate=estimate,
        statistic=None if statistic is None else float(statistic),
        p_value=float(result.pvalue),
        parameter=None if df is None else {"df": float(np.asarray(df))},
        conf_int=conf_int,
        conf_level=conf_level if conf_int is not None else None,
        method=method,
        kind=kind,
    )


def as_htest(x: Any) -> HTestResult:
    """
    Coerce x to an HTestResult.

    Raises:
        InvalidTestResultError: If x is not a recognizable test result
    """
    if isinstance(x, HTestResult):
        return x
    if isinstance(x, Mapping):
        return from_mapping(x)
    if hasattr(x, "pvalue"):
        return from_scipy(x)
    raise InvalidTestResultError(
        f"expected a hypothesis test result, got {describe_type(x)}"
    )
