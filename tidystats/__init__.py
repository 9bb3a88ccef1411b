"""
tidystats: tidy tables from statistical model objects.

Every supported model family gets the same three views, each a pandas
DataFrame without row labels:

    tidy(x)      one row per coefficient (or per test)
    augment(x)   one row per observation: data + .fitted + .resid
    glance(x)    one row of model-level statistics

Submodules:
    nls: Nonlinear least squares (fit via scipy) and its tidiers
    htest: Hypothesis test results and their tidier
"""

__version__ = "0.1.0"

from tidystats import nls
from tidystats import htest
from tidystats.tidiers import tidy, augment, glance, register_tidier, get_tidier

__all__ = [
    "__version__",
    "nls",
    "htest",
    "tidy",
    "augment",
    "glance",
    "register_tidier",
    "get_tidier",
]
