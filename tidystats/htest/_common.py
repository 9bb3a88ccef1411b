"""
Common types for hypothesis test results.

Defines HTestResult (maps to R's htest class) and TestKind, the explicit
tag that tells the tidier which special cases apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping, Sequence, Union
import numpy as np
from numpy.typing import NDArray


Estimate = Union[float, Sequence[float], Mapping[str, float], NDArray[np.floating[Any]]]


class TestKind(Enum):
    """
    What sort of test produced a result.

    Only TWO_SAMPLE_MEANS changes tidying: its two estimates are the group
    means, and their difference is reported as the estimate.
    """
    __test__ = False

    ONE_SAMPLE_MEANS = "one_sample_means"
    PAIRED_MEANS = "paired_means"
    TWO_SAMPLE_MEANS = "two_sample_means"
    OTHER = "other"

    @classmethod
    def from_method(cls, method: str | None) -> 'TestKind':
        """Kind implied by one of R's method labels; OTHER if unknown."""
        if method is None:
            return cls.OTHER
        return METHOD_LABELS.get(method, cls.OTHER)


# Method labels exactly as R's t.test() emits them (the pooled
# two-sample label really does start with a space).
METHOD_LABELS: dict[str, TestKind] = {
    "One Sample t-test": TestKind.ONE_SAMPLE_MEANS,
    "Paired t-test": TestKind.PAIRED_MEANS,
    "Welch Two Sample t-test": TestKind.TWO_SAMPLE_MEANS,
    " Two Sample t-test": TestKind.TWO_SAMPLE_MEANS,
}


@dataclass(frozen=True)
class HTestResult:
    """
    Result of a hypothesis test, as consumed by tidy_htest().

    Maps to R's htest structure with every field nullable: a field that
    is None is absent and produces no column.

    Attributes
    ----------
    estimate : float, sequence, mapping or None
        Point estimate(s), e.g. 5.1 or {"mean of x": 5.0, "mean of y": 3.0}.
    statistic : float or None
        Test statistic value.
    p_value : float or None
        p-value of the test.
    parameter : float, mapping or None
        Distribution parameter(s), e.g. {"df": 9} or
        {"num df": 4, "denom df": 8}.
    conf_int : pair or None
        Confidence interval (lower, upper).
    conf_level : float or None
        Confidence level of conf_int.
    method : str or None
        Human-readable method name, e.g. "Welch Two Sample t-test".
    kind : TestKind or None
        Explicit test kind. When None it is derived from method.
    statistic_name : str or None
        Name of the statistic ("t", "X-squared", "W", ...).
    null_value : mapping or None
        Hypothesized value under H0.
    alternative : str or None
        "two.sided", "less" or "greater".
    data_name : str or None
        Description of the data.
    """
    estimate: Estimate | None = None
    statistic: float | None = None
    p_value: float | None = None
    parameter: float | Mapping[str, float] | Sequence[float] | None = None
    conf_int: Sequence[float] | NDArray[np.floating[Any]] | None = None
    conf_level: float | None = None
    method: str | None = None
    kind: TestKind | None = None
    statistic_name: str | None = None
    null_value: Mapping[str, float] | None = None
    alternative: str | None = None
    data_name: str | None = None

    tidy_kind: ClassVar[str] = "htest"

    @property
    def test_kind(self) -> TestKind:
        """The explicit kind, or the one implied by the method label."""
        if self.kind is not None:
            return self.kind
        return TestKind.from_method(self.method)
