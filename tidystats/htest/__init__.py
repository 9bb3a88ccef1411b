"""
Hypothesis test results and their tidier.

Public API:
    HTestResult                  - test result record (R's htest)
    TestKind                     - explicit test kind tag
    tidy_htest(result)           - one-row table
    glance_htest(result)         - same as tidy_htest
    from_scipy(res, ...)         - adapt a scipy.stats result
    from_mapping(d)              - adapt an R-style field bag
"""

from tidystats.htest._common import HTestResult, TestKind, METHOD_LABELS
from tidystats.htest.adapters import from_scipy, from_mapping, as_htest
from tidystats.htest.tidiers import tidy_htest, glance_htest, HTestTidier

__all__ = [
    "HTestResult",
    "TestKind",
    "METHOD_LABELS",
    "from_scipy",
    "from_mapping",
    "as_htest",
    "tidy_htest",
    "glance_htest",
    "HTestTidier",
]
