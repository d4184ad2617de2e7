"""
Rich tables for stage summaries.

Every table renders undefined values as 'n/a' / '(Undefined)' so nothing
missing is silently shown as zero.
"""
from __future__ import annotations

from typing import Iterable

import pandas as pd
from rich.panel import Panel
from rich.table import Table

from macro_regimes.returns.models import TTestResult
from macro_regimes.utils.formatting import fmt_float, fmt_int, fmt_label, fmt_pct, fmt_signed_pct


def paths_table(title: str, paths: Iterable[object]) -> Table:
    t = Table(title=title, show_header=False, box=None, padding=(0, 2))
    t.add_column("Path", style="dim")
    for p in paths:
        t.add_row(str(p))
    return t


def qa_table(qa: pd.DataFrame) -> Table:
    t = Table(title="Monthly panel QA", show_header=True, header_style="bold cyan")
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    if qa.empty:
        return t
    row = qa.iloc[0]
    for k, v in row.items():
        if isinstance(v, pd.Timestamp):
            t.add_row(str(k), v.strftime("%Y-%m-%d"))
        else:
            t.add_row(str(k), fmt_int(v))
    return t


def thresholds_table(report: pd.DataFrame) -> Table:
    t = Table(title="Regime thresholds", show_header=True, header_style="bold cyan")
    t.add_column("Metric", style="cyan")
    t.add_column("p25", justify="right")
    t.add_column("p75", justify="right")
    t.add_column("Fixed", justify="right")
    t.add_column("Obs", justify="right")
    for r in report.itertuples(index=False):
        t.add_row(r.metric, fmt_float(r.p25), fmt_float(r.p75), fmt_float(r.threshold), fmt_int(r.n_obs))
    return t


def counts_table(counts: pd.DataFrame) -> Table:
    t = Table(title="Regime counts", show_header=True, header_style="bold cyan")
    t.add_column("Regime type", style="cyan")
    t.add_column("Regime")
    t.add_column("Months", justify="right")
    for r in counts.itertuples(index=False):
        t.add_row(r.regime_type, str(r.regime), fmt_int(r.n))
    return t


def summary_table(summary: pd.DataFrame, title: str = "Returns by regime") -> Table:
    t = Table(title=title, show_header=True, header_style="bold cyan")
    t.add_column("Asset", style="cyan")
    t.add_column("Regime type")
    t.add_column("Regime")
    t.add_column("n", justify="right")
    t.add_column("Mean", justify="right")
    t.add_column("SD", justify="right")
    t.add_column("Ann. mean", justify="right")
    t.add_column("Ann. SD", justify="right")
    for r in summary.itertuples(index=False):
        t.add_row(
            r.asset, r.regime_type, fmt_label(r.regime), fmt_int(r.n),
            fmt_float(r.mean, 4), fmt_float(r.sd, 4),
            fmt_float(r.annualized_mean, 4), fmt_float(r.annualized_sd, 4),
        )
    return t


def ttest_panel(result: TTestResult) -> Panel:
    title = f"Welch t-test: {result.group1} vs {result.group2}"
    if result.skipped:
        body = (
            f"[yellow]Skipped[/yellow]: {result.reason}\n"
            f"n({result.group1})={result.n1}  n({result.group2})={result.n2}"
        )
        return Panel(body, title=title, border_style="yellow")
    body = (
        f"mean({result.group1}) {fmt_signed_pct(result.mean1, decimals=2)}   "
        f"mean({result.group2}) {fmt_signed_pct(result.mean2, decimals=2)}\n"
        f"diff {fmt_signed_pct(result.diff_mean, decimals=2)}   "
        f"t {fmt_float(result.t_stat)}   df {fmt_float(result.df, 1)}   p {fmt_float(result.p_value, 4)}\n"
        f"{fmt_pct(result.conf_level, decimals=0)} CI [{fmt_signed_pct(result.conf_low, decimals=2)}, "
        f"{fmt_signed_pct(result.conf_high, decimals=2)}]   n={result.n1}/{result.n2}\n"
        f"[dim]{result.caveat}[/dim]"
    )
    return Panel(body, title=title, border_style="cyan")
