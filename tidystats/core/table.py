"""
Tidy table helpers.

A tidy table is a pandas DataFrame with a default RangeIndex: identifying
information lives in named columns ('term', '.rownames') or is dropped,
never in the index. These helpers normalize arbitrary tabular inputs into
that shape and are shared by every tidier.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd

from tidystats.core.exceptions import DimensionError, ValidationError


def as_data_frame(x: Any, name: str = "data") -> pd.DataFrame:
    """
    Coerce a DataFrame, mapping of columns or 2D array to a DataFrame.

    The input is never modified; a DataFrame input is copied.

    Raises:
        ValidationError: If x cannot be interpreted as a table
    """
    if isinstance(x, pd.DataFrame):
        return x.copy()
    if isinstance(x, pd.Series):
        return x.to_frame()
    if isinstance(x, Mapping):
        try:
            return pd.DataFrame(dict(x))
        except ValueError as e:
            raise ValidationError(f"{name}: cannot build a table from mapping: {e}") from e
    arr = np.asarray(x)
    if arr.ndim == 2:
        return pd.DataFrame(arr)
    raise ValidationError(
        f"{name}: expected a DataFrame, mapping of columns or 2D array, "
        f"got {type(x).__name__}"
    )


def has_trivial_index(df: pd.DataFrame) -> bool:
    """True if the index is just 0..n-1, i.e. carries no information."""
    index = df.index
    if isinstance(index, pd.RangeIndex):
        return index.start == 0 and index.step == 1
    if not pd.api.types.is_integer_dtype(index):
        return False
    return bool(np.array_equal(index.to_numpy(), np.arange(len(index))))


def unrowname(df: pd.DataFrame) -> pd.DataFrame:
    """Discard row labels, leaving a default RangeIndex."""
    return df.reset_index(drop=True)


def fix_data_frame(
    x: Any,
    newnames: Sequence[str] | None = None,
    newcol: str = "term",
) -> pd.DataFrame:
    """
    Normalize a table into tidy form.

    Row labels that carry information are moved into a leading column named
    ``newcol``; the index is then reset. Columns are optionally renamed.

    Args:
        x: DataFrame, mapping of columns or 2D array
        newnames: New column names, one per existing column
        newcol: Name of the column receiving the row labels

    Returns:
        A new DataFrame with a default RangeIndex

    Raises:
        DimensionError: If newnames does not match the number of columns
    """
    ret = as_data_frame(x)
    if newnames is not None:
        newnames = list(newnames)
        if len(newnames) != ret.shape[1]:
            raise DimensionError(
                f"newnames: expected {ret.shape[1]} names, got {len(newnames)}"
            )
        ret.columns = newnames

    if not has_trivial_index(ret):
        labels = [str(label) for label in ret.index]
        ret = unrowname(ret)
        ret.insert(0, newcol, labels)
        return ret
    return unrowname(ret)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes)):
        return False
    if isinstance(value, (Mapping, Sequence, np.ndarray)):
        return len(value) == 0
    return False


def compact(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Drop entries that are None or zero-length, keeping order."""
    return {k: v for k, v in fields.items() if not _is_empty(v)}


def one_row_frame(fields: Mapping[str, Any]) -> pd.DataFrame:
    """
    Build a single-row DataFrame from scalar fields, in the given order.

    Raises:
        DimensionError: If any field is not a scalar
    """
    row = {}
    for key, value in fields.items():
        arr = np.asarray(value)
        if arr.ndim != 0:
            raise DimensionError(
                f"{key}: expected a scalar for a one-row table, got shape {arr.shape}"
            )
        row[key] = arr.item()
    return pd.DataFrame([row], columns=list(row))
