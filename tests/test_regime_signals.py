from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from conftest import make_panel
from macro_regimes.config import RegimeConfig
from macro_regimes.errors import PanelValidationError
from macro_regimes.regimes.models import MISSING_LABEL, REGIME_COLUMNS
from macro_regimes.regimes.signals import build_regime_table, regime_counts, regime_counts_summary


def test_rising_rate_scenario(rising_rate_panel):
    tagged = build_regime_table(rising_rate_panel).tagged
    direction = tagged["rate_direction_regime"]
    assert direction.iloc[:12].isna().all()
    assert (direction.iloc[12:] == "Rising").all()


def test_build_regime_table_adds_derived_and_label_columns(synthetic_panel):
    result = build_regime_table(synthetic_panel)
    tagged = result.tagged
    for col in ("inflation_yoy", "rate_change_12m", *REGIME_COLUMNS):
        assert col in tagged.columns
    assert len(tagged) == 60
    assert tagged["inflation_yoy"].iloc[:12].isna().all()
    assert tagged["inflation_yoy"].iloc[12:].notna().all()
    # sample cycles, so every direction label shows up
    assert set(tagged["rate_direction_regime"].dropna()) == {"Rising", "Falling", "Stable"}
    assert set(tagged["rate_level_regime"].dropna()) == {"Low", "Mid", "High"}


def test_build_regime_table_sorts_unordered_input(synthetic_panel):
    shuffled = synthetic_panel.sample(frac=1.0, random_state=7)
    a = build_regime_table(synthetic_panel).tagged
    b = build_regime_table(shuffled).tagged
    pd.testing.assert_frame_equal(a, b)


def test_missing_cpi_values_degrade_to_undefined():
    panel = make_panel(48)
    panel.loc[20, "CPIAUCSL"] = np.nan
    tagged = build_regime_table(panel).tagged
    # month 20 and the month 12 later both lose their YoY
    assert pd.isna(tagged.loc[20, "inflation_yoy"])
    assert pd.isna(tagged.loc[32, "inflation_yoy"])
    assert tagged.loc[20, "inflation_regime"] is None
    assert tagged.loc[20, "joint_regime"] is None
    assert tagged.loc[20, "rate_direction_regime"] is not None


def test_thin_sample_leaves_percentile_regimes_undefined():
    tagged = build_regime_table(make_panel(20)).tagged
    assert tagged["rate_level_regime"].isna().all()
    assert tagged["inflation_regime"].isna().all()
    assert tagged["rate_direction_regime"].notna().sum() == 8


def test_missing_required_column_is_fatal(synthetic_panel):
    with pytest.raises(PanelValidationError, match="CPIAUCSL"):
        build_regime_table(synthetic_panel.drop(columns=["CPIAUCSL"]))


def test_duplicate_dates_are_fatal(synthetic_panel):
    dup = pd.concat([synthetic_panel, synthetic_panel.iloc[[5]]], ignore_index=True)
    with pytest.raises(PanelValidationError, match="Duplicate"):
        build_regime_table(dup)


def test_direction_band_is_configurable(rising_rate_panel):
    tagged = build_regime_table(rising_rate_panel, config=RegimeConfig(direction_threshold_pp=1.0)).tagged
    assert (tagged["rate_direction_regime"].iloc[12:] == "Stable").all()


def test_regime_counts_include_missing_label(rising_rate_panel):
    tagged = build_regime_table(rising_rate_panel).tagged
    counts = regime_counts(tagged)
    direction = counts[counts["regime_type"] == "rate_direction_regime"].set_index("regime")["n"]
    assert direction.to_dict() == {"Rising": 24, MISSING_LABEL: 12}
    # every regime type accounts for every month
    assert (counts.groupby("regime_type")["n"].sum() == 36).all()


def test_regime_counts_summary(rising_rate_panel):
    tagged = build_regime_table(rising_rate_panel).tagged
    s = regime_counts_summary(tagged).iloc[0]
    assert s["n_rows"] == 36
    assert s["n_rate_direction_missing"] == 12
    assert s["n_complete_regimes"] == 24


def test_skipped_month_is_fatal(rising_rate_panel):
    with pytest.raises(PanelValidationError, match="skips"):
        build_regime_table(rising_rate_panel.drop(index=5))


def test_missing_month_row_keeps_calendar_lag(rising_rate_panel):
    panel = rising_rate_panel.copy()
    panel.loc[5, ["EFFR", "CPIAUCSL"]] = np.nan
    tagged = build_regime_table(panel).tagged
    # 2001-01-31 looks back to 2000-01-31, which is present
    assert tagged.loc[12, "date"] == pd.Timestamp("2001-01-31")
    assert tagged.loc[12, "rate_change_12m"] == pytest.approx(0.5)
    assert tagged.loc[12, "rate_direction_regime"] == "Rising"
    # only the month whose lookback is the blank row loses its label
    assert tagged.loc[17, "rate_direction_regime"] is None
    assert tagged.loc[18, "rate_direction_regime"] == "Rising"
