from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from macro_regimes.config import PanelColumns, RegimeConfig
from macro_regimes.panel.builder import sort_panel, validate_panel
from macro_regimes.panel.transforms import log_return, yield_change, yield_to_monthly_simple
from macro_regimes.regimes.models import REGIME_COLUMNS
from macro_regimes.returns.models import AssetSpec, ReturnAnalysis, default_assets
from macro_regimes.returns.stats import grouped_return_stats
from macro_regimes.returns.ttest import welch_t_test

logger = logging.getLogger(__name__)


def _asset_return(df: pd.DataFrame, asset: AssetSpec, periods_per_year: int) -> pd.Series:
    src = df[asset.source]
    if asset.kind == "log_return":
        return log_return(src)
    if asset.kind == "simple_yield":
        return yield_to_monthly_simple(src, periods_per_year=periods_per_year)
    if asset.kind == "yield_change":
        return yield_change(src)
    raise ValueError(f"Unknown return kind {asset.kind!r} for {asset.name}")


def add_asset_returns(
    df: pd.DataFrame,
    assets: Sequence[AssetSpec] | None = None,
    columns: PanelColumns | None = None,
    periods_per_year: int = 12,
) -> pd.DataFrame:
    """
    Regime-tagged table -> return-enriched table.

    Each return uses only the current and previous month. Usability flags
    mark rows with both core regimes and rows with each asset's return.
    """
    columns = columns or PanelColumns()
    assets = tuple(assets) if assets is not None else default_assets(columns)

    validate_panel(df, required=[a.source for a in assets] + ["rate_direction_regime", "inflation_regime"])
    out = sort_panel(df)

    for asset in assets:
        out[asset.column] = _asset_return(out, asset, periods_per_year)

    out["has_core_regimes"] = out["rate_direction_regime"].notna() & out["inflation_regime"].notna()
    by_kind = {a.kind: a.column for a in assets}
    flags = {
        "has_equity_return": "log_return",
        "has_cash_return": "simple_yield",
        "has_bond_proxy": "yield_change",
    }
    for flag, kind in flags.items():
        if kind in by_kind:
            out[flag] = out[by_kind[kind]].notna()
    return out


def build_return_tables(
    tagged: pd.DataFrame,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
) -> ReturnAnalysis:
    config = config or RegimeConfig()
    columns = columns or PanelColumns()
    assets = default_assets(columns)
    equity, _cash, bond = assets

    validate_panel(tagged, required=list(REGIME_COLUMNS))
    enriched = add_asset_returns(tagged, assets=assets, columns=columns, periods_per_year=config.periods_per_year)

    summary = grouped_return_stats(enriched, assets, REGIME_COLUMNS, periods_per_year=config.periods_per_year)
    joint_summary = (
        summary[(summary["asset"] == equity.name) & (summary["regime_type"] == "joint_regime")]
        .sort_values("n", ascending=False, kind="mergesort")
        .reset_index(drop=True)
    )
    bond_proxy_summary = summary[
        (summary["asset"] == bond.name) & (summary["regime_type"] == "rate_direction_regime")
    ].reset_index(drop=True)

    ttest = welch_t_test(
        enriched,
        value_col=equity.column,
        regime_col="rate_direction_regime",
        group1=config.ttest_group1,
        group2=config.ttest_group2,
        min_obs=config.ttest_min_obs,
        confidence=config.ttest_confidence,
    )
    if not ttest.skipped:
        logger.info(
            "%s: %s vs %s diff=%.4f t=%.2f p=%.3f (n=%d/%d)",
            equity.name, ttest.group1, ttest.group2, ttest.diff_mean, ttest.t_stat, ttest.p_value, ttest.n1, ttest.n2,
        )

    return ReturnAnalysis(
        enriched=enriched,
        summary=summary,
        joint_summary=joint_summary,
        bond_proxy_summary=bond_proxy_summary,
        ttest=ttest,
    )
