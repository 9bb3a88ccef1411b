"""
Tests for tidy_htest() and glance_htest().

Reference values from R:
    t.test(1:5, mu = 3)          t = 0, df = 4, p = 1, CI [1.036757, 4.963243]
    t.test(1:5, 4:8)             Welch, t = -3, df = 8, p = 0.01707168,
                                 CI [-5.306004, -0.693996], means 3 and 6
"""

import numpy as np
import pytest
from pandas.testing import assert_frame_equal

from tidystats.core.exceptions import InvalidTestResultError
from tidystats.htest import HTestResult, TestKind, glance_htest, tidy_htest


@pytest.fixture
def one_sample():
    return HTestResult(
        estimate={"mean of x": 3.0},
        statistic=0.0,
        p_value=1.0,
        parameter={"df": 4.0},
        conf_int=np.array([1.036757, 4.963243]),
        conf_level=0.95,
        method="One Sample t-test",
        statistic_name="t",
        null_value={"mean": 3.0},
        alternative="two.sided",
        data_name="1:5",
    )


@pytest.fixture
def welch():
    return HTestResult(
        estimate={"mean of x": 3.0, "mean of y": 6.0},
        statistic=-3.0,
        p_value=0.017071681233782634,
        parameter={"df": 8.0},
        conf_int=(-5.306004135204166, -0.693995864795834),
        method="Welch Two Sample t-test",
    )


class TestOneSample:

    def test_columns(self, one_sample):
        td = tidy_htest(one_sample)
        assert td.shape == (1, 6)
        assert list(td.columns) == [
            "estimate", "statistic", "p.value", "parameter", "conf.low", "conf.high",
        ]

    def test_values(self, one_sample):
        row = tidy_htest(one_sample).iloc[0]
        assert row["estimate"] == 3.0
        assert row["parameter"] == 4.0
        assert row["conf.low"] <= row["estimate"] <= row["conf.high"]

    def test_scalar_estimate(self):
        td = tidy_htest(HTestResult(estimate=2.5, p_value=0.2))
        assert list(td.columns) == ["estimate", "p.value"]


class TestTwoSample:

    def test_welch_difference(self):
        result = HTestResult(estimate=(5.0, 3.0), statistic=1.9, p_value=0.08,
                             parameter=7.3, method="Welch Two Sample t-test")
        row = tidy_htest(result).iloc[0]
        assert row["estimate"] == 2.0
        assert row["estimate1"] == 5.0
        assert row["estimate2"] == 3.0

    def test_column_order(self, welch):
        td = tidy_htest(welch)
        assert list(td.columns) == [
            "estimate", "estimate1", "estimate2", "statistic", "p.value",
            "parameter", "conf.low", "conf.high",
        ]
        assert td["estimate"].iloc[0] == -3.0

    def test_pooled_label(self):
        result = HTestResult(estimate=(3.0, 6.0), p_value=0.017, method=" Two Sample t-test")
        assert tidy_htest(result)["estimate"].iloc[0] == -3.0

    def test_kind_tag_overrides_label(self):
        result = HTestResult(estimate=(5.0, 3.0), p_value=0.1,
                             method="my custom test", kind=TestKind.TWO_SAMPLE_MEANS)
        assert tidy_htest(result)["estimate"].iloc[0] == 2.0

    def test_kind_tag_suppresses_difference(self):
        result = HTestResult(estimate=(5.0, 3.0), p_value=0.1,
                             method="Welch Two Sample t-test", kind=TestKind.OTHER)
        assert list(tidy_htest(result).columns) == ["estimate1", "estimate2", "p.value"]

    def test_other_multi_estimate(self):
        """prop.test with two groups: estimates split, no difference."""
        result = HTestResult(
            estimate={"prop 1": 0.4, "prop 2": 0.6},
            statistic=0.8, p_value=0.37, parameter={"df": 1.0},
            conf_int=(-0.6, 0.2),
            method="2-sample test for equality of proportions with continuity correction",
        )
        td = tidy_htest(result)
        assert list(td.columns) == [
            "estimate1", "estimate2", "statistic", "p.value", "parameter",
            "conf.low", "conf.high",
        ]


class TestFieldSelection:

    def test_absent_fields_dropped(self):
        """fisher.test-like result without statistic or parameter."""
        result = HTestResult(estimate={"odds ratio": 6.4}, p_value=0.035,
                             conf_int=(1.1, 48.0))
        td = tidy_htest(result)
        assert list(td.columns) == ["estimate", "p.value", "conf.low", "conf.high"]

    def test_empty_estimate_compacted(self):
        td = tidy_htest(HTestResult(estimate=[], statistic=3.2, p_value=0.07))
        assert list(td.columns) == ["statistic", "p.value"]

    def test_two_parameters_split(self):
        """var.test: num df and denom df."""
        result = HTestResult(estimate={"ratio of variances": 0.5}, statistic=0.5,
                             p_value=0.3, parameter={"num df": 4.0, "denom df": 7.0})
        td = tidy_htest(result)
        assert list(td.columns) == [
            "estimate", "statistic", "p.value", "parameter1", "parameter2",
        ]
        assert td["parameter2"].iloc[0] == 7.0

    def test_conf_int_positional(self):
        td = tidy_htest(HTestResult(p_value=0.5, conf_int=(2.0, -1.0)))
        assert td["conf.low"].iloc[0] == 2.0
        assert td["conf.high"].iloc[0] == -1.0

    def test_nan_statistic_kept(self):
        td = tidy_htest(HTestResult(statistic=np.nan, p_value=np.nan))
        assert list(td.columns) == ["statistic", "p.value"]
        assert np.isnan(td["statistic"].iloc[0])

    def test_no_fields(self):
        with pytest.raises(InvalidTestResultError):
            tidy_htest(HTestResult(method="nothing here"))

    def test_bad_conf_int(self):
        with pytest.raises(InvalidTestResultError, match="pair"):
            tidy_htest(HTestResult(p_value=0.5, conf_int=(1.0, 2.0, 3.0)))

    def test_named_statistic(self):
        td = tidy_htest({"statistic": {"t": 2.5}, "p.value": 0.02})
        assert td["statistic"].iloc[0] == 2.5

    def test_vector_statistic(self):
        with pytest.raises(InvalidTestResultError, match="single value"):
            tidy_htest(HTestResult(statistic=(1.0, 2.0)))

    def test_non_numeric_estimate(self):
        with pytest.raises(InvalidTestResultError, match="estimate"):
            tidy_htest(HTestResult(estimate="big", p_value=0.5))


class TestGlance:

    def test_same_as_tidy(self, welch):
        assert_frame_equal(glance_htest(welch), tidy_htest(welch), check_exact=True)

    def test_idempotent(self, one_sample):
        assert_frame_equal(tidy_htest(one_sample), tidy_htest(one_sample), check_exact=True)

    def test_input_not_modified(self, welch):
        before = dict(welch.estimate)
        tidy_htest(welch)
        assert welch.estimate == before
