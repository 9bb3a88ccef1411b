"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pandas as pd
import pytest

from tidystats.nls import nls


# R's datasets::Puromycin, treated cells
PUROMYCIN_CONC = [0.02, 0.02, 0.06, 0.06, 0.11, 0.11,
                  0.22, 0.22, 0.56, 0.56, 1.10, 1.10]
PUROMYCIN_RATE = [76, 47, 97, 107, 123, 139,
                  159, 152, 191, 201, 207, 200]


def michaelis_menten(conc, Vm, K):
    return Vm * conc / (K + conc)


def exponential_decay(t, k):
    return np.exp(-k * t)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def puromycin():
    """Puromycin reaction velocity data (treated)."""
    return pd.DataFrame({"conc": PUROMYCIN_CONC, "rate": PUROMYCIN_RATE})


@pytest.fixture
def puromycin_fit(puromycin):
    """nls(rate ~ Vm * conc / (K + conc), Puromycin, start = c(Vm=200, K=0.05))"""
    return nls(michaelis_menten, puromycin, {"Vm": 200.0, "K": 0.05}, response="rate")


@pytest.fixture
def decay_data(rng):
    """Single-parameter exponential decay with noise, true k = 0.5."""
    t = np.linspace(0.0, 6.0, 25)
    y = np.exp(-0.5 * t) + rng.normal(0.0, 0.02, t.size)
    return pd.DataFrame({"t": t, "y": y})


@pytest.fixture
def decay_fit(decay_data):
    return nls(exponential_decay, decay_data, {"k": 1.0}, response="y")
