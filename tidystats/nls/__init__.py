"""
Nonlinear least squares and its tidiers.

Public API:
    nls(model, data, start, response=...)   - fit (delegates to scipy)
    tidy_nls(fit, conf_int, conf_level)      - per-parameter table
    augment_nls(fit, data)                   - per-observation table
    glance_nls(fit)                          - one-row model summary
"""

from tidystats.nls.solvers import nls
from tidystats.nls.tidiers import tidy_nls, augment_nls, glance_nls, NLSTidier
from tidystats.nls.design import NLSDesign
from tidystats.nls._common import NLSControl, ConvInfo, NLSParams
from tidystats.nls.solution import NLSSolution, NLSSummary

__all__ = [
    "nls",
    "tidy_nls",
    "augment_nls",
    "glance_nls",
    "NLSTidier",
    "NLSDesign",
    "NLSControl",
    "ConvInfo",
    "NLSParams",
    "NLSSolution",
    "NLSSummary",
]
