"""
Two-sample significance test on returns between two regime labels.

Welch's unequal-variance t-test (scipy.stats.ttest_ind, equal_var=False); the
Welch-Satterthwaite degrees of freedom and the confidence interval on
mean1 - mean2 come from the same scipy result. The test treats months as
independent draws; the serial-correlation caveat travels with every result
instead of being corrected for.
"""
from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd

from macro_regimes.config import RegimeConfig
from macro_regimes.returns.models import TTestResult

logger = logging.getLogger(__name__)

_DEFAULTS = RegimeConfig()


def _skip(group1: str, group2: str, n1: int, n2: int, reason: str) -> TTestResult:
    logger.warning("t-test %s vs %s skipped: %s", group1, group2, reason)
    return TTestResult(status="skipped", group1=group1, group2=group2, n1=n1, n2=n2, reason=reason)


def welch_t_test(
    df: pd.DataFrame,
    value_col: str,
    regime_col: str,
    group1: str = _DEFAULTS.ttest_group1,
    group2: str = _DEFAULTS.ttest_group2,
    min_obs: int = _DEFAULTS.ttest_min_obs,
    confidence: float = _DEFAULTS.ttest_confidence,
) -> TTestResult:
    """
    Compare mean `value_col` between two labels of `regime_col`.

    Skipped (not raised) when the two groups together hold fewer than
    `min_obs` non-missing values, when a label is absent, when a group has
    fewer than two values, or when neither group varies.
    """
    from scipy import stats

    values = pd.to_numeric(df[value_col], errors="coerce").replace([np.inf, -np.inf], np.nan)
    data = pd.DataFrame({"regime": df[regime_col], "value": values})
    data = data[data["regime"].isin([group1, group2]) & data["value"].notna()]

    x1 = data.loc[data["regime"] == group1, "value"].to_numpy(dtype=float)
    x2 = data.loc[data["regime"] == group2, "value"].to_numpy(dtype=float)
    n1, n2 = len(x1), len(x2)

    if n1 + n2 < min_obs:
        return _skip(group1, group2, n1, n2, f"insufficient data: {n1 + n2} observations (need {min_obs})")
    if n1 == 0 or n2 == 0:
        absent = group1 if n1 == 0 else group2
        return _skip(group1, group2, n1, n2, f"insufficient data: no observations labelled {absent}")
    if n1 < 2 or n2 < 2:
        return _skip(group1, group2, n1, n2, "insufficient data: each group needs at least 2 observations")
    # exact spread, not variance: float variance of a constant group is ~1e-36
    if np.ptp(x1) == 0.0 and np.ptp(x2) == 0.0:
        return _skip(group1, group2, n1, n2, "zero variance in both groups")

    res = stats.ttest_ind(x1, x2, equal_var=False)
    if not (math.isfinite(res.statistic) and math.isfinite(res.pvalue)):
        return _skip(group1, group2, n1, n2, "test statistic is not finite")
    ci = res.confidence_interval(confidence_level=confidence)
    mean1, mean2 = float(np.mean(x1)), float(np.mean(x2))

    return TTestResult(
        status="ok",
        group1=group1,
        group2=group2,
        n1=n1,
        n2=n2,
        mean1=mean1,
        mean2=mean2,
        diff_mean=mean1 - mean2,
        t_stat=float(res.statistic),
        df=float(res.df),
        p_value=float(res.pvalue),
        conf_level=confidence,
        conf_low=float(ci.low),
        conf_high=float(ci.high),
    )
