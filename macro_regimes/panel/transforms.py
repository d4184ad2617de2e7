from __future__ import annotations

import numpy as np
import pandas as pd


def _finite(values: pd.Series) -> pd.Series:
    """Replace +/-inf with NaN so bad arithmetic reads as undefined, never as a number."""
    return values.replace([np.inf, -np.inf], np.nan)


def yoy_from_index_level(level: pd.Series, lag: int = 12) -> pd.Series:
    """YoY percent change for index levels like CPI on a monthly grid.

    (CPI_t / CPI_{t-lag} - 1) * 100. Undefined when either end is missing or
    the lagged level is not strictly positive.
    """
    level = pd.to_numeric(level, errors="coerce").astype(float)
    prev = level.shift(lag)
    ok = level.notna() & prev.notna() & (prev > 0)
    out = pd.Series(np.nan, index=level.index, dtype=float)
    out[ok] = (level[ok] / prev[ok] - 1.0) * 100.0
    return _finite(out)


def level_change(level: pd.Series, lag: int = 12) -> pd.Series:
    """level_t - level_{t-lag}; undefined when either end is missing."""
    level = pd.to_numeric(level, errors="coerce").astype(float)
    return _finite(level - level.shift(lag))


def log_return(price: pd.Series) -> pd.Series:
    """ln(P_t / P_{t-1}); undefined when either value is missing or non-positive."""
    price = pd.to_numeric(price, errors="coerce").astype(float)
    prev = price.shift(1)
    ok = price.notna() & prev.notna() & (price > 0) & (prev > 0)
    out = pd.Series(np.nan, index=price.index, dtype=float)
    out[ok] = np.log(price[ok] / prev[ok])
    return _finite(out)


def yield_to_monthly_simple(yield_pct: pd.Series, periods_per_year: int = 12) -> pd.Series:
    """Annualized percent yield -> monthly simple return proxy: (y / 100) / 12."""
    y = pd.to_numeric(yield_pct, errors="coerce").astype(float)
    return _finite((y / 100.0) / float(periods_per_year))


def yield_change(yield_pct: pd.Series) -> pd.Series:
    """Month-over-month change in a yield (percentage points, not a return)."""
    return level_change(yield_pct, lag=1)
