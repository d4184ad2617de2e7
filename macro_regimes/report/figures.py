"""
Figures for the regime / return study.

Reads the return-enriched table and writes PNGs; no statistics are computed
here beyond what is needed to draw (cumulative index, regime spans, simple
error bars).
"""
from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
import pandas as pd

from macro_regimes.config import PanelColumns
from macro_regimes.regimes.models import RATE_DIRECTION_LABELS
from macro_regimes.returns.models import default_assets
from macro_regimes.returns.stats import return_stats

logger = logging.getLogger(__name__)

REGIME_COLORS = {"Falling": "#3b82f6", "Stable": "#9ca3af", "Rising": "#ef4444"}


def cumulative_index(df: pd.DataFrame, return_col: str, base: float = 100.0) -> pd.DataFrame:
    """Rows with a log return, plus `cum_index` = exp(cumsum(r)) * base."""
    out = df[df[return_col].notna()].sort_values("date").copy()
    out["cum_index"] = np.exp(out[return_col].cumsum()) * base
    return out.reset_index(drop=True)


def regime_runs(df: pd.DataFrame, regime_col: str = "rate_direction_regime") -> pd.DataFrame:
    """Contiguous spans of one defined label: columns regime, start, end, n."""
    d = df[df[regime_col].notna()].sort_values("date")
    if d.empty:
        return pd.DataFrame(columns=["regime", "start", "end", "n"])
    reg = d[regime_col].astype(str)
    run_id = (reg != reg.shift()).cumsum()
    runs = (
        d.assign(_reg=reg, _run=run_id)
        .groupby("_run")
        .agg(regime=("_reg", "first"), start=("date", "min"), end=("date", "max"), n=("date", "size"))
        .reset_index(drop=True)
    )
    return runs


def _plt():
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    return plt


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    logger.info("Saved figure %s", path)
    return path


def plot_policy_rate(df: pd.DataFrame, out_dir: Path, columns: PanelColumns | None = None) -> Path:
    columns = columns or PanelColumns()
    plt = _plt()
    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(df["date"], df[columns.policy_rate], linewidth=1.2)
    ax.set_title(f"{columns.policy_rate} (monthly)", fontweight="bold")
    ax.set_xlabel("Date")
    ax.set_ylabel("Rate (%)")
    ax.grid(True, which="major", linestyle="--", linewidth=0.6)
    ax.text(0.0, -0.12, f"Source: FRED ({columns.policy_rate}), month-end observation", transform=ax.transAxes, fontsize=8)
    try:
        return _save(fig, out_dir / "fig01_effr_time_series.png")
    finally:
        plt.close(fig)


def plot_cumulative_with_regimes(df: pd.DataFrame, out_dir: Path, columns: PanelColumns | None = None) -> Path:
    equity = default_assets(columns)[0]
    plt = _plt()
    cum = cumulative_index(df, equity.column)
    runs = regime_runs(cum)

    fig, ax = plt.subplots(figsize=(11, 6))
    seen: set[str] = set()
    for run in runs.itertuples(index=False):
        label = run.regime if run.regime not in seen else None
        seen.add(run.regime)
        ax.axvspan(run.start, run.end, color=REGIME_COLORS.get(run.regime, "#d1d5db"), alpha=0.15, label=label, linewidth=0)
    ax.plot(cum["date"], cum["cum_index"], color="black", linewidth=1.0)
    ax.set_title(f"{equity.source} cumulative performance with rate-direction regime shading", fontweight="bold")
    ax.set_xlabel("Date")
    ax.set_ylabel("Cumulative index (base = 100)")
    if seen:
        ax.legend(title="Rate direction regime", loc="upper left")
    ax.grid(True, which="major", linestyle="--", linewidth=0.6)
    try:
        return _save(fig, out_dir / "fig02_sp500_cumulative_with_regime_shading.png")
    finally:
        plt.close(fig)


def plot_returns_boxplot(df: pd.DataFrame, out_dir: Path, columns: PanelColumns | None = None) -> Path:
    equity = default_assets(columns)[0]
    plt = _plt()
    d = df[df[equity.column].notna() & df["rate_direction_regime"].notna()]
    labels = [lab for lab in RATE_DIRECTION_LABELS if (d["rate_direction_regime"] == lab).any()]
    data = [d.loc[d["rate_direction_regime"] == lab, equity.column].to_numpy() * 100.0 for lab in labels]

    fig, ax = plt.subplots(figsize=(10, 6))
    if data:
        ax.boxplot(data, flierprops={"alpha": 0.25})
        ax.set_xticks(range(1, len(labels) + 1), labels)
    ax.axhline(0, linewidth=0.6, linestyle="--", color="grey")
    ax.set_title(f"Monthly {equity.source} returns by rate-direction regime", fontweight="bold")
    ax.set_xlabel("Rate direction regime")
    ax.set_ylabel("Monthly return (log, %)")
    try:
        return _save(fig, out_dir / "fig03_sp500_returns_boxplot_by_regime.png")
    finally:
        plt.close(fig)


def annualized_means_with_ci(df: pd.DataFrame, return_col: str, periods_per_year: int = 12) -> pd.DataFrame:
    """Annualized mean per direction regime with a plain 95% CI (not HAC adjusted)."""
    rows = []
    for lab in RATE_DIRECTION_LABELS:
        s = return_stats(df.loc[df["rate_direction_regime"] == lab, return_col], periods_per_year=periods_per_year)
        if s.n == 0:
            continue
        ci_low = ci_high = None
        if s.sd is not None:
            se = s.sd / math.sqrt(s.n)
            ci_low = (s.mean - 1.96 * se) * periods_per_year
            ci_high = (s.mean + 1.96 * se) * periods_per_year
        rows.append({"regime": lab, "n": s.n, "annualized_mean": s.annualized_mean, "ci_low": ci_low, "ci_high": ci_high})
    return pd.DataFrame(rows, columns=["regime", "n", "annualized_mean", "ci_low", "ci_high"])


def plot_annualized_means(df: pd.DataFrame, out_dir: Path, columns: PanelColumns | None = None) -> Path:
    equity = default_assets(columns)[0]
    plt = _plt()
    summary = annualized_means_with_ci(df, equity.column)

    fig, ax = plt.subplots(figsize=(10, 6))
    if not summary.empty:
        x = np.arange(len(summary))
        means = summary["annualized_mean"].astype(float).to_numpy() * 100.0
        ax.bar(x, means, color=[REGIME_COLORS.get(r, "#9ca3af") for r in summary["regime"]])
        has_ci = summary["ci_low"].notna().to_numpy()
        if has_ci.any():
            lo = summary["ci_low"].astype(float).to_numpy() * 100.0
            hi = summary["ci_high"].astype(float).to_numpy() * 100.0
            ax.errorbar(
                x[has_ci], means[has_ci],
                yerr=[means[has_ci] - lo[has_ci], hi[has_ci] - means[has_ci]],
                fmt="none", ecolor="black", capsize=6,
            )
        ax.set_xticks(x, summary["regime"].tolist())
    ax.axhline(0, linewidth=0.6, color="grey")
    ax.set_title(f"Annualized mean {equity.source} returns by rate-direction regime", fontweight="bold")
    ax.set_xlabel("Rate direction regime")
    ax.set_ylabel("Annualized mean return (%)")
    ax.text(0.0, -0.12, "Error bars: simple 95% CI on the mean (not adjusted for time-series dependence).",
            transform=ax.transAxes, fontsize=8)
    try:
        return _save(fig, out_dir / "fig04_sp500_annualized_mean_by_regime.png")
    finally:
        plt.close(fig)


def render_all(df: pd.DataFrame, out_dir: Path, columns: PanelColumns | None = None) -> list[Path]:
    """Write all four figures; returns their paths."""
    df = df.sort_values("date").reset_index(drop=True)
    return [
        plot_policy_rate(df, out_dir, columns),
        plot_cumulative_with_regimes(df, out_dir, columns),
        plot_returns_boxplot(df, out_dir, columns),
        plot_annualized_means(df, out_dir, columns),
    ]
