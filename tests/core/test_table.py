"""
Tests for the tidy table helpers.
"""

import numpy as np
import pandas as pd
import pytest

from tidystats.core.exceptions import DimensionError, ValidationError
from tidystats.core.table import (
    as_data_frame,
    compact,
    fix_data_frame,
    has_trivial_index,
    one_row_frame,
    unrowname,
)


class TestFixDataFrame:

    def test_row_labels_become_term(self):
        df = pd.DataFrame({"a": [1.0, 2.0]}, index=["x", "y"])
        out = fix_data_frame(df)
        assert list(out.columns) == ["term", "a"]
        assert out["term"].tolist() == ["x", "y"]
        assert isinstance(out.index, pd.RangeIndex)

    def test_newnames(self):
        df = pd.DataFrame([[1.0, 2.0]], columns=["Estimate", "Std. Error"], index=["b"])
        out = fix_data_frame(df, ["estimate", "stderror"])
        assert list(out.columns) == ["term", "estimate", "stderror"]

    def test_newnames_length(self):
        df = pd.DataFrame([[1.0, 2.0]])
        with pytest.raises(DimensionError):
            fix_data_frame(df, ["only_one"])

    def test_trivial_index_dropped(self):
        df = pd.DataFrame({"a": [1.0, 2.0, 3.0]})
        out = fix_data_frame(df, newcol=".rownames")
        assert list(out.columns) == ["a"]

    def test_shuffled_integer_index_kept(self):
        df = pd.DataFrame({"a": [1.0, 2.0]}, index=[5, 2])
        out = fix_data_frame(df, newcol=".rownames")
        assert out[".rownames"].tolist() == ["5", "2"]

    def test_input_untouched(self):
        df = pd.DataFrame({"a": [1.0, 2.0]}, index=["x", "y"])
        fix_data_frame(df, ["b"])
        assert list(df.columns) == ["a"]
        assert list(df.index) == ["x", "y"]

    def test_mapping(self):
        out = fix_data_frame({"a": [1, 2], "b": [3, 4]})
        assert out.shape == (2, 2)


class TestHelpers:

    def test_has_trivial_index(self):
        assert has_trivial_index(pd.DataFrame({"a": [1, 2]}))
        assert has_trivial_index(pd.DataFrame({"a": [1, 2]}, index=[0, 1]))
        assert not has_trivial_index(pd.DataFrame({"a": [1, 2]}, index=[1, 2]))
        assert not has_trivial_index(pd.DataFrame({"a": [1, 2]}, index=["p", "q"]))

    def test_unrowname(self):
        out = unrowname(pd.DataFrame({"a": [1, 2]}, index=["p", "q"]))
        assert isinstance(out.index, pd.RangeIndex)

    def test_compact(self):
        fields = {"a": 1.0, "b": None, "c": [], "d": np.array([]), "e": "text", "f": 0.0}
        assert compact(fields) == {"a": 1.0, "e": "text", "f": 0.0}

    def test_one_row_frame(self):
        out = one_row_frame({"x": 1.0, "flag": True, "label": "t"})
        assert out.shape == (1, 3)
        assert list(out.columns) == ["x", "flag", "label"]
        assert out["flag"].dtype == bool

    def test_one_row_frame_rejects_vectors(self):
        with pytest.raises(DimensionError):
            one_row_frame({"x": [1.0, 2.0]})

    def test_as_data_frame_rejects_scalar(self):
        with pytest.raises(ValidationError):
            as_data_frame(3.0)

    def test_as_data_frame_ragged_mapping(self):
        with pytest.raises(ValidationError):
            as_data_frame({"a": [1, 2], "b": [1, 2, 3]})
