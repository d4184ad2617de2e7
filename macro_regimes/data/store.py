"""
CSV persistence for stage outputs.

Each stage reads the previous stage's table and writes its own. Missing values
are written as empty cells and come back as NaN, so undefined regimes and
undefined statistics survive the round trip.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from macro_regimes.config import ProjectDirs

logger = logging.getLogger(__name__)

RAW_LONG = "fred_series_long_raw.csv"
MONTHLY_PANEL = "macro_asset_monthly_panel.csv"
PANEL_QA = "qa_monthly_panel_summary.csv"
WITH_REGIMES = "macro_asset_monthly_with_regimes.csv"
REGIME_THRESHOLDS = "regime_thresholds.csv"
REGIME_COUNTS = "regime_counts.csv"
REGIME_COUNTS_SUMMARY = "regime_counts_summary.csv"
WITH_RETURNS = "asset_returns_with_regimes.csv"
RETURNS_SUMMARY = "returns_summary_by_regime.csv"
JOINT_SUMMARY = "returns_summary_by_joint_regime.csv"
BOND_PROXY_SUMMARY = "dgs10_change_by_rate_direction.csv"
TTEST_RESULT = "t_test_equity_rising_vs_falling.csv"

BOOL_COLUMNS = ("has_core_regimes", "has_equity_return", "has_cash_return", "has_bond_proxy")


def write_table(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    out = df.copy()
    if "date" in out.columns:
        out["date"] = pd.to_datetime(out["date"]).dt.strftime("%Y-%m-%d")
    out.to_csv(path, index=False)
    logger.info("Saved %s (%d rows)", path, len(out))
    return path


def read_table(path: Path, stage_hint: str | None = None) -> pd.DataFrame:
    """Read a stage table; a missing file means the upstream stage has not run."""
    if not path.exists():
        hint = f" Run `{stage_hint}` first." if stage_hint else ""
        raise FileNotFoundError(f"Cannot find {path}.{hint}")
    df = pd.read_csv(path)
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"])
    for c in BOOL_COLUMNS:
        if c in df.columns:
            df[c] = df[c].astype(bool)
    return df


def raw_path(dirs: ProjectDirs) -> Path:
    return dirs.raw / RAW_LONG


def panel_path(dirs: ProjectDirs) -> Path:
    return dirs.processed / MONTHLY_PANEL


def regimes_path(dirs: ProjectDirs) -> Path:
    return dirs.processed / WITH_REGIMES


def returns_path(dirs: ProjectDirs) -> Path:
    return dirs.processed / WITH_RETURNS


def table_path(dirs: ProjectDirs, name: str) -> Path:
    return dirs.tables / name
