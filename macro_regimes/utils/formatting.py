"""
Display formatting utilities for CLI output.

Missing values (None or NaN) always render as 'n/a' so that undefined
statistics stay visibly undefined in tables.
"""
from __future__ import annotations

import math
from typing import Any, Optional


def is_missing(x: Any) -> bool:
    """True for None, NaN, pandas NA and non-numeric placeholders."""
    if x is None:
        return True
    if isinstance(x, (int, float)):
        return isinstance(x, float) and math.isnan(x)
    try:
        import pandas as pd
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def fmt_int(x: Optional[int]) -> str:
    """Format integer with comma separators, or 'n/a'."""
    if is_missing(x):
        return "n/a"
    return f"{int(x):,}"


def fmt_float(x: Optional[float], decimals: int = 2) -> str:
    """Format float with specified decimals, or 'n/a'."""
    if is_missing(x):
        return "n/a"
    return f"{float(x):.{decimals}f}"


def fmt_pct(x: Optional[float], decimals: int = 1, multiply: bool = True) -> str:
    """
    Format as percentage.

    Args:
        x: Value to format
        decimals: Decimal places to show
        multiply: If True, multiply by 100 (i.e., 0.05 -> 5.0%)
    """
    if is_missing(x):
        return "n/a"
    value = float(x) * 100.0 if multiply else float(x)
    return f"{value:.{decimals}f}%"


def fmt_signed_pct(x: Optional[float], decimals: int = 1, multiply: bool = True) -> str:
    """Format as signed percentage with + prefix for positives."""
    if is_missing(x):
        return "n/a"
    value = float(x) * 100.0 if multiply else float(x)
    return f"{value:+.{decimals}f}%"


def fmt_label(x: Any) -> str:
    """Regime label, with undefined shown explicitly."""
    if is_missing(x):
        return "(Undefined)"
    return str(x)
