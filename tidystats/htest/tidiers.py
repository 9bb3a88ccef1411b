"""
Tidier for hypothesis test results.

tidy_htest() turns a test result into a one-row DataFrame. Which columns
appear depends on which fields the test filled in:

    estimate       effect size (or estimate1 - estimate2, see below)
    estimate1..k   individual estimates when the test reports several
    statistic      test statistic
    p.value        p-value
    parameter      distribution parameter, typically degrees of freedom
                   (parameter1..k when there are several)
    conf.low       lower confidence bound
    conf.high      upper confidence bound

For a two-sample comparison of means the two group means are reported as
estimate1 and estimate2, preceded by their difference as estimate.

glance_htest() returns the same table. There is no augment: a hypothesis
test has no per-observation values.
"""

from __future__ import annotations

from typing import Any, Mapping
import numpy as np
import pandas as pd

from tidystats.core.exceptions import InvalidModelError, InvalidTestResultError
from tidystats.core.table import compact, one_row_frame
from tidystats.htest._common import TestKind
from tidystats.htest.adapters import as_htest


FIELD_ORDER = ("estimate", "statistic", "p.value", "parameter")


def _values(value: Any, name: str) -> list[float] | None:
    """Flatten a scalar, sequence or name->value mapping to a list."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = list(value.values())
    try:
        return np.asarray(value, dtype=np.float64).ravel().tolist()
    except (TypeError, ValueError) as e:
        raise InvalidTestResultError(f"{name}: expected numeric values: {e}") from e


def _scalar(value: Any, name: str) -> float | None:
    values = _values(value, name)
    if values is None:
        return None
    if len(values) != 1:
        raise InvalidTestResultError(f"{name}: expected a single value, got {len(values)}")
    return values[0]


def _split(name: str, values: list[float]) -> dict[str, float]:
    return {f"{name}{i}": v for i, v in enumerate(values, start=1)}


def tidy_htest(x: Any) -> pd.DataFrame:
    """
    Tidy a hypothesis test result into a one-row DataFrame.

    Args:
        x: HTestResult, R-style field mapping, or scipy test result

    Returns:
        One-row DataFrame; the columns depend on the fields present

    Raises:
        InvalidTestResultError: If none of the recognized fields are present,
            or the confidence interval is not a pair
    """
    result = as_htest(x)
    present = {
        "estimate": _values(result.estimate, "estimate"),
        "statistic": _scalar(result.statistic, "statistic"),
        "p.value": _scalar(result.p_value, "p.value"),
        "parameter": _values(result.parameter, "parameter"),
    }

    ret: dict[str, Any] = {}
    estimate = present.pop("estimate")
    if estimate is not None and len(estimate) > 1:
        splits = _split("estimate", estimate)
        if result.test_kind is TestKind.TWO_SAMPLE_MEANS:
            ret["estimate"] = splits["estimate1"] - splits["estimate2"]
        ret.update(splits)
    elif estimate:
        ret["estimate"] = estimate[0]

    for name in FIELD_ORDER[1:]:
        value = present[name]
        if name == "parameter" and value is not None:
            if len(value) > 1:
                ret.update(_split("parameter", value))
                continue
            value = value[0] if value else None
        ret[name] = value

    ret = compact(ret)

    if result.conf_int is not None:
        bounds = _values(result.conf_int, "conf_int")
        if len(bounds) != 2:
            raise InvalidTestResultError(
                f"conf_int: expected a (lower, upper) pair, got {len(bounds)} values"
            )
        ret["conf.low"] = bounds[0]
        ret["conf.high"] = bounds[1]

    if not ret:
        raise InvalidTestResultError(
            "test result has none of estimate, statistic, p.value, "
            "parameter or conf.int"
        )
    return one_row_frame(ret)


def glance_htest(x: Any) -> pd.DataFrame:
    """Same as tidy_htest(): a test's glance is its tidy summary."""
    return tidy_htest(x)


class HTestTidier:
    """Tidier capability set for hypothesis test results."""

    @property
    def kind(self) -> str:
        return "htest"

    def tidy(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        return tidy_htest(x)

    def augment(self, x: Any, **kwargs: Any) -> pd.DataFrame:
        raise InvalidModelError(
            "augment is not defined for hypothesis tests: a test has no "
            "per-observation values",
            model_type=type(x).__name__,
        )

    def glance(self, x: Any) -> pd.DataFrame:
        return glance_htest(x)
