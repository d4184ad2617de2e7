from __future__ import annotations

import logging

import pandas as pd

from macro_regimes.config import PanelColumns, RegimeConfig
from macro_regimes.panel.builder import sort_panel, validate_panel
from macro_regimes.panel.transforms import level_change, yoy_from_index_level
from macro_regimes.regimes.models import MISSING_LABEL, REGIME_COLUMNS, RegimeClassification
from macro_regimes.regimes.regime import classify_regimes
from macro_regimes.regimes.thresholds import compute_thresholds, threshold_report

logger = logging.getLogger(__name__)


def add_derived_fields(
    df: pd.DataFrame,
    columns: PanelColumns | None = None,
    lag: int = 12,
) -> pd.DataFrame:
    """
    Add `inflation_yoy` (CPI YoY, %) and `rate_change_12m` (policy rate change, pp).

    Assumes the frame is sorted and on a complete monthly grid.
    """
    columns = columns or PanelColumns()
    out = df.copy()
    out["inflation_yoy"] = yoy_from_index_level(out[columns.cpi], lag=lag)
    out["rate_change_12m"] = level_change(out[columns.policy_rate], lag=lag)
    return out


def regime_counts(df: pd.DataFrame) -> pd.DataFrame:
    """
    Frequency of each label per regime type, with undefined rows counted
    under an explicit "Missing" label.
    """
    parts = []
    for col in REGIME_COLUMNS:
        labels = df[col].astype("object").where(df[col].notna(), MISSING_LABEL)
        counts = labels.value_counts(sort=False).rename_axis("regime").reset_index(name="n")
        counts.insert(0, "regime_type", col)
        parts.append(counts)
    out = pd.concat(parts, ignore_index=True)
    out["n"] = out["n"].astype(int)
    return out.sort_values(["regime_type", "n", "regime"], ascending=[True, False, True], kind="mergesort").reset_index(drop=True)


def regime_counts_summary(df: pd.DataFrame) -> pd.DataFrame:
    complete = df["rate_direction_regime"].notna() & df["rate_level_regime"].notna() & df["inflation_regime"].notna()
    return pd.DataFrame(
        [
            {
                "n_rows": int(len(df)),
                "n_complete_regimes": int(complete.sum()),
                "n_rate_direction_missing": int(df["rate_direction_regime"].isna().sum()),
                "n_rate_level_missing": int(df["rate_level_regime"].isna().sum()),
                "n_inflation_missing": int(df["inflation_regime"].isna().sum()),
            }
        ]
    )


def build_regime_table(
    panel: pd.DataFrame,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
) -> RegimeClassification:
    """
    Observation panel -> regime-tagged table plus QA reports.

    Fails fast if the panel lacks the date, policy-rate or CPI columns, or if
    dates repeat. Everything else degrades to undefined labels.
    """
    config = config or RegimeConfig()
    columns = columns or PanelColumns()

    validate_panel(panel, required=[columns.policy_rate, columns.cpi])
    df = sort_panel(panel)
    df = add_derived_fields(df, columns=columns, lag=config.lag_months)

    thresholds = compute_thresholds(df, config=config, columns=columns)
    tagged = classify_regimes(df, thresholds, columns=columns)
    summary = regime_counts_summary(tagged)
    logger.info(
        "Classified %d months (%d with complete regimes)",
        int(summary.at[0, "n_rows"]), int(summary.at[0, "n_complete_regimes"]),
    )

    return RegimeClassification(
        tagged=tagged,
        thresholds=thresholds,
        threshold_report=threshold_report(thresholds, columns=columns),
        counts=regime_counts(tagged),
        counts_summary=summary,
    )
