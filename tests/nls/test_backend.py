"""
Tests for the CPU backend helpers: numeric gradient and the relative-offset
convergence criterion.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from tidystats.core.compute.qr import qr_cpu
from tidystats.nls.backends.cpu import numeric_gradient, relative_offset


class TestNumericGradient:

    def test_linear_model_exact(self):
        x = np.linspace(0.0, 1.0, 5)
        J = numeric_gradient(lambda th: th[0] + th[1] * x, np.array([2.0, 3.0]))
        assert_allclose(J, np.column_stack([np.ones(5), x]), atol=1e-9)

    def test_exponential(self):
        x = np.linspace(0.0, 2.0, 7)
        J = numeric_gradient(lambda th: np.exp(-th[0] * x), np.array([0.7]))
        assert_allclose(J[:, 0], -x * np.exp(-0.7 * x), rtol=1e-8, atol=1e-12)


class TestRelativeOffset:

    def test_zero_at_least_squares_solution(self, rng):
        X = np.column_stack([np.ones(20), rng.standard_normal(20)])
        y = X @ [1.0, 2.0] + rng.standard_normal(20)
        beta, *_ = np.linalg.lstsq(X, y, rcond=None)
        assert relative_offset(qr_cpu(X), y - X @ beta) == pytest.approx(0.0, abs=1e-10)

    def test_positive_away_from_solution(self, rng):
        X = np.column_stack([np.ones(20), rng.standard_normal(20)])
        y = X @ [1.0, 2.0] + rng.standard_normal(20)
        assert relative_offset(qr_cpu(X), y - X @ [0.0, 0.0]) > 0.1

    def test_zero_residuals(self):
        X = np.column_stack([np.ones(4), np.arange(4.0)])
        assert relative_offset(qr_cpu(X), np.zeros(4)) == 0.0

    def test_scale_offset(self):
        X = np.column_stack([np.ones(4), np.arange(4.0)])
        r = X @ [0.1, 0.0]  # entirely inside the tangent plane
        assert relative_offset(qr_cpu(X), r) > 1e6
        assert relative_offset(qr_cpu(X), r, scale_offset=1.0) == pytest.approx(
            np.sqrt(np.sum(r ** 2) / 2.0))


class TestQR:

    def test_rank_tolerance(self):
        x = np.linspace(1.0, 2.0, 10)
        X = np.column_stack([x, x + 1e-9 * x ** 2])
        assert qr_cpu(X).rank == 2
        assert qr_cpu(X, tol=1e-7).rank == 1

    def test_unscaled_covariance(self, rng):
        X = rng.standard_normal((15, 3))
        assert_allclose(qr_cpu(X).unscaled_covariance(), np.linalg.inv(X.T @ X), rtol=1e-10)
