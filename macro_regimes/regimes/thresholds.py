"""
Full-sample percentile thresholds for the level-style regimes.

Quantiles use linear interpolation between order statistics (Hyndman & Fan
type 7, numpy's default `method="linear"`): for sorted x of length n and
probability p, h = (n - 1) * p and Q(p) = x[floor(h)] + (h - floor(h)) *
(x[floor(h) + 1] - x[floor(h)]).
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from macro_regimes.config import PanelColumns, RegimeConfig
from macro_regimes.regimes.models import PercentileBand, RegimeThresholds

logger = logging.getLogger(__name__)

_DEFAULTS = RegimeConfig()


def _usable(values: pd.Series | Sequence[float]) -> pd.Series:
    """Finite numeric values; missing, non-numeric and +/-inf are dropped."""
    x = pd.to_numeric(pd.Series(values), errors="coerce").astype("float64")
    return x.replace([np.inf, -np.inf], np.nan).dropna()


def safe_quantile(
    values: pd.Series | Sequence[float],
    probs: Sequence[float],
    min_obs: int = _DEFAULTS.min_threshold_obs,
) -> list[float | None]:
    """
    Quantiles of the finite values, or all None if fewer than `min_obs`
    of them exist.
    """
    x = _usable(values)
    if len(x) < min_obs:
        return [None for _ in probs]
    q = np.quantile(x.to_numpy(dtype=float), list(probs), method="linear")
    return [float(v) for v in q]


def percentile_band(values: pd.Series, config: RegimeConfig, name: str = "") -> PercentileBand:
    n_obs = int(len(_usable(values)))
    lower, upper = safe_quantile(values, (config.lower_quantile, config.upper_quantile), min_obs=config.min_threshold_obs)
    band = PercentileBand(lower=lower, upper=upper, n_obs=n_obs)
    if not band.is_defined:
        logger.warning(
            "Only %d observations for %s thresholds (need %d); %s regimes will be undefined",
            n_obs, name or "percentile", config.min_threshold_obs, name or "these",
        )
    return band


def compute_thresholds(
    df: pd.DataFrame,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
) -> RegimeThresholds:
    """Thresholds from the full history. Expects `inflation_yoy` to be present."""
    config = config or RegimeConfig()
    columns = columns or PanelColumns()
    return RegimeThresholds(
        rate_level=percentile_band(df[columns.policy_rate], config, name="rate level"),
        inflation=percentile_band(df["inflation_yoy"], config, name="inflation"),
        direction_pp=float(config.direction_threshold_pp),
    )


def threshold_report(thresholds: RegimeThresholds, columns: PanelColumns | None = None) -> pd.DataFrame:
    """One row per metric with the cut-offs actually used."""
    columns = columns or PanelColumns()
    rate = columns.policy_rate
    return pd.DataFrame(
        [
            {
                "metric": f"{rate}_level",
                "p25": thresholds.rate_level.lower,
                "p75": thresholds.rate_level.upper,
                "threshold": None,
                "n_obs": thresholds.rate_level.n_obs,
                "notes": f"Rate level regime thresholds based on {rate} percentiles",
            },
            {
                "metric": "Inflation_YoY",
                "p25": thresholds.inflation.lower,
                "p75": thresholds.inflation.upper,
                "threshold": None,
                "n_obs": thresholds.inflation.n_obs,
                "notes": "Inflation regime thresholds based on CPI YoY percentiles",
            },
            {
                "metric": f"{rate}_12m_change_pp",
                "p25": None,
                "p75": None,
                "threshold": thresholds.direction_pp,
                "n_obs": None,
                "notes": f"Direction regime uses +/- threshold on 12m change in {rate}",
            },
        ],
        columns=["metric", "p25", "p75", "threshold", "n_obs", "notes"],
    )
