from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from macro_regimes.regimes.models import REGIME_LABELS
from macro_regimes.returns.models import AssetSpec, ReturnStats

SUMMARY_COLUMNS = ["asset", "regime_type", "regime", "n", "mean", "sd", "annualized_mean", "annualized_sd"]


def return_stats(values: pd.Series | Sequence[float], periods_per_year: int = 12) -> ReturnStats:
    """
    Descriptive stats over the non-missing values.

    mean needs one observation, the sample sd (ddof=1) needs two. Annualized
    as mean * 12 and sd * sqrt(12), i.e. treating months as i.i.d.
    """
    r = pd.to_numeric(pd.Series(values, dtype="float64"), errors="coerce").replace([np.inf, -np.inf], np.nan).dropna()
    n = int(len(r))
    mean = float(r.mean()) if n >= 1 else None
    sd = float(r.std(ddof=1)) if n >= 2 else None
    return ReturnStats(
        n=n,
        mean=mean,
        sd=sd,
        annualized_mean=mean * periods_per_year if mean is not None else None,
        annualized_sd=sd * math.sqrt(periods_per_year) if sd is not None else None,
    )


def grouped_return_stats(
    df: pd.DataFrame,
    assets: Iterable[AssetSpec],
    regime_types: Iterable[str],
    periods_per_year: int = 12,
) -> pd.DataFrame:
    """
    Long table of return stats per (asset, regime type, label).

    Only records whose label for that regime type is defined take part. Every
    label of the regime type is reported, including empty and single-month
    partitions, so gaps in coverage stay visible.
    """
    rows: list[dict] = []
    for asset in assets:
        for regime_type in regime_types:
            labels = REGIME_LABELS.get(regime_type)
            defined = df[df[regime_type].notna()]
            if labels is None:
                labels = tuple(sorted(defined[regime_type].astype(str).unique()))
            for label in labels:
                vals = defined.loc[defined[regime_type] == label, asset.column]
                stats = return_stats(vals, periods_per_year=periods_per_year)
                rows.append({"asset": asset.name, "regime_type": regime_type, "regime": label, **stats.to_dict()})
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
