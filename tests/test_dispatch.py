"""
Tests for the generic tidy(), augment() and glance().
"""

import pandas as pd
import pytest
from pandas.testing import assert_frame_equal

import tidystats
from tidystats import augment, get_tidier, glance, register_tidier, tidy
from tidystats.core.exceptions import InvalidModelError, ValidationError
from tidystats.core.protocols import Tidier
from tidystats.htest import HTestResult, HTestTidier
from tidystats.nls import NLSTidier, augment_nls, glance_nls, tidy_nls


@pytest.fixture
def welch():
    return HTestResult(estimate=(5.0, 3.0), statistic=2.0, p_value=0.07,
                       parameter=8.0, conf_int=(-0.3, 4.3),
                       method="Welch Two Sample t-test")


class TestNLSDispatch:

    def test_tidy(self, puromycin_fit):
        assert_frame_equal(tidy(puromycin_fit), tidy_nls(puromycin_fit))

    def test_tidy_kwargs(self, puromycin_fit):
        td = tidy(puromycin_fit, conf_int=True, conf_level=0.9)
        assert "conf.low" in td.columns

    def test_augment(self, puromycin_fit, puromycin):
        assert_frame_equal(augment(puromycin_fit, data=puromycin),
                           augment_nls(puromycin_fit, data=puromycin))

    def test_glance(self, puromycin_fit):
        assert_frame_equal(glance(puromycin_fit), glance_nls(puromycin_fit))

    def test_selected_tidier(self, puromycin_fit):
        assert isinstance(get_tidier(puromycin_fit), NLSTidier)


class TestHTestDispatch:

    def test_tidy_and_glance(self, welch):
        td = tidy(welch)
        assert td.shape[0] == 1
        assert td["estimate"].iloc[0] == 2.0
        assert_frame_equal(glance(welch), td)

    def test_no_augment(self, welch):
        with pytest.raises(InvalidModelError, match="per-observation"):
            augment(welch)

    def test_selected_tidier(self, welch):
        assert isinstance(get_tidier(welch), HTestTidier)


class TestRegistry:

    def test_untagged_object(self):
        with pytest.raises(InvalidModelError, match="tidy_kind"):
            tidy(pd.DataFrame())

    def test_unknown_kind(self):
        class Tagged:
            tidy_kind = "lm"

        with pytest.raises(InvalidModelError, match="'lm'"):
            glance(Tagged())

    def test_duplicate_kind(self):
        with pytest.raises(ValidationError, match="already registered"):
            register_tidier(NLSTidier())

    def test_rejects_non_tidier(self):
        with pytest.raises(ValidationError):
            register_tidier(object())

    def test_custom_family(self):
        class ConstantTidier:
            kind = "constant"

            def tidy(self, x, **kwargs):
                return pd.DataFrame({"term": ["c"], "estimate": [x.value]})

            def augment(self, x, **kwargs):
                raise InvalidModelError("no observations")

            def glance(self, x):
                return pd.DataFrame({"value": [x.value]})

        class Constant:
            tidy_kind = "constant"
            value = 7.0

        tidier = ConstantTidier()
        assert isinstance(tidier, Tidier)
        register_tidier(tidier, replace=True)
        assert tidy(Constant())["estimate"].iloc[0] == 7.0

    def test_builtin_tidiers_satisfy_protocol(self):
        assert isinstance(NLSTidier(), Tidier)
        assert isinstance(HTestTidier(), Tidier)


def test_version():
    assert tidystats.__version__ == "0.1.0"
