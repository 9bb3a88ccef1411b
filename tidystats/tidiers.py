"""
Generic tidy(), augment() and glance().

Each supported result type carries a ``tidy_kind`` tag ('nls', 'htest');
the tag selects a registered Tidier, the capability set
{tidy, augment, glance} for that model family. New families plug in with
register_tidier() without touching this module.
"""

from __future__ import annotations

from typing import Any
import pandas as pd

from tidystats.core.exceptions import InvalidModelError, ValidationError, describe_type
from tidystats.core.protocols import Tidier
from tidystats.htest.tidiers import HTestTidier
from tidystats.nls.tidiers import NLSTidier


_REGISTRY: dict[str, Tidier] = {}


def register_tidier(tidier: Tidier, *, replace: bool = False) -> None:
    """
    Register a tidier under its kind.

    Raises:
        ValidationError: If tidier does not implement the Tidier protocol,
            or the kind is taken and replace is False
    """
    if not isinstance(tidier, Tidier):
        raise ValidationError(
            f"tidier: {describe_type(tidier)} does not implement tidy/augment/glance"
        )
    kind = tidier.kind
    if kind in _REGISTRY and not replace:
        raise ValidationError(f"a tidier for kind {kind!r} is already registered")
    _REGISTRY[kind] = tidier


def get_tidier(x: Any) -> Tidier:
    """
    Tidier for x, selected by its tidy_kind tag.

    Raises:
        InvalidModelError: If x has no tag or no tidier is registered for it
    """
    kind = getattr(x, "tidy_kind", None)
    if kind is None:
        raise InvalidModelError(
            f"{describe_type(x)} has no tidy_kind; use a family-specific tidier "
            f"or register one",
            model_type=describe_type(x),
            missing="tidy_kind",
        )
    try:
        return _REGISTRY[kind]
    except KeyError:
        raise InvalidModelError(
            f"no tidier registered for kind {kind!r}; known kinds: {sorted(_REGISTRY)}",
            model_type=describe_type(x),
        ) from None


def tidy(x: Any, **kwargs: Any) -> pd.DataFrame:
    """Per-term (or per-test) summary table of x."""
    return get_tidier(x).tidy(x, **kwargs)


def augment(x: Any, **kwargs: Any) -> pd.DataFrame:
    """Per-observation table: the data with fitted values and residuals."""
    return get_tidier(x).augment(x, **kwargs)


def glance(x: Any) -> pd.DataFrame:
    """One-row model-level summary of x."""
    return get_tidier(x).glance(x)


register_tidier(NLSTidier())
register_tidier(HTestTidier())
