from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from conftest import make_panel
from macro_regimes.errors import PanelValidationError
from macro_regimes.regimes.models import REGIME_LABELS
from macro_regimes.returns.models import default_assets
from macro_regimes.returns.signals import add_asset_returns, build_return_tables


def _tagged(n: int, **overrides) -> pd.DataFrame:
    df = make_panel(n, **overrides)
    df["rate_direction_regime"] = pd.Series(["Rising"] * n, dtype="object")
    df["rate_level_regime"] = pd.Series(["Mid"] * n, dtype="object")
    df["inflation_regime"] = pd.Series(["Moderate"] * n, dtype="object")
    df["joint_regime"] = pd.Series(["Moderate + Rising"] * n, dtype="object")
    return df


def test_default_assets_follow_panel_columns():
    equity, cash, bond = default_assets()
    assert (equity.source, equity.column, equity.kind) == ("SP500", "ret_sp500_log", "log_return")
    assert (cash.source, cash.column, cash.kind) == ("TB3MS", "ret_tb3ms_simple", "simple_yield")
    assert (bond.source, bond.column, bond.kind) == ("DGS10", "d_dgs10_pp", "yield_change")


def test_add_asset_returns_columns_and_flags():
    df = _tagged(6, SP500=[100.0, 105.0, np.nan, 110.0, 120.0, 130.0], TB3MS=4.8)
    df.loc[0, "inflation_regime"] = None
    out = add_asset_returns(df)

    assert out.loc[1, "ret_sp500_log"] == pytest.approx(math.log(1.05))
    assert out.loc[0, "ret_tb3ms_simple"] == pytest.approx(0.004)
    assert list(out["has_equity_return"]) == [False, True, False, False, True, True]
    assert out["has_cash_return"].all()
    assert list(out["has_bond_proxy"]) == [False] + [True] * 5
    assert list(out["has_core_regimes"]) == [False] + [True] * 5


def test_alternating_prices_annualized_mean():
    prices = [100.0, 105.0] * 18
    result = build_return_tables(_tagged(36, SP500=prices))
    equity = default_assets()[0]

    returns = result.enriched["ret_sp500_log"]
    assert returns.iloc[1::2].tolist() == pytest.approx([math.log(1.05)] * 18)
    assert returns.iloc[2::2].tolist() == pytest.approx([math.log(100 / 105)] * 17)

    row = result.summary[
        (result.summary["asset"] == equity.name)
        & (result.summary["regime_type"] == "rate_direction_regime")
        & (result.summary["regime"] == "Rising")
    ].iloc[0]
    assert row["n"] == 35
    assert row["mean"] == pytest.approx(returns.mean())
    assert row["annualized_mean"] == pytest.approx(row["mean"] * 12)


def test_build_return_tables_shapes(tagged_panel):
    result = build_return_tables(tagged_panel)
    n_labels = sum(len(labels) for labels in REGIME_LABELS.values())
    assert len(result.summary) == 3 * n_labels

    assert len(result.joint_summary) == 9
    assert (result.joint_summary["regime_type"] == "joint_regime").all()
    assert result.joint_summary["n"].is_monotonic_decreasing

    assert list(result.bond_proxy_summary["regime"]) == ["Falling", "Stable", "Rising"]
    assert result.ttest.group1 == "Rising"
    assert result.ttest.group2 == "Falling"


def test_build_return_tables_handles_thin_sample():
    result = build_return_tables(_tagged(10))
    assert result.ttest.skipped
    assert "insufficient data" in result.ttest.reason


def test_missing_regime_columns_are_fatal(synthetic_panel):
    with pytest.raises(PanelValidationError, match="rate_direction_regime"):
        build_return_tables(synthetic_panel)


def test_skipped_month_is_fatal_for_returns():
    gapped = _tagged(12).drop(index=5)
    with pytest.raises(PanelValidationError, match="skips"):
        add_asset_returns(gapped)
