from __future__ import annotations

from dataclasses import asdict, dataclass, field

import pandas as pd

from macro_regimes.config import PanelColumns

SERIAL_CORRELATION_CAVEAT = (
    "Independent-samples Welch test on monthly returns; ignores serial correlation "
    "within regime runs, so p-values overstate significance."
)


@dataclass(frozen=True)
class AssetSpec:
    name: str           # display name used in summary tables
    source: str         # panel column the return is computed from
    column: str         # return column added to the table
    kind: str           # "log_return" | "simple_yield" | "yield_change"


def default_assets(columns: PanelColumns | None = None) -> tuple[AssetSpec, ...]:
    c = columns or PanelColumns()
    return (
        AssetSpec(f"{c.equity} (log return)", c.equity, f"ret_{c.equity.lower()}_log", "log_return"),
        AssetSpec(f"{c.short_yield} (simple approx)", c.short_yield, f"ret_{c.short_yield.lower()}_simple", "simple_yield"),
        AssetSpec(f"{c.long_yield} (change pp)", c.long_yield, f"d_{c.long_yield.lower()}_pp", "yield_change"),
    )


@dataclass(frozen=True)
class ReturnStats:
    n: int
    mean: float | None
    sd: float | None
    annualized_mean: float | None
    annualized_sd: float | None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TTestResult:
    """Two-sample mean-difference test, or an explicit skipped marker."""
    status: str                      # "ok" | "skipped"
    group1: str
    group2: str
    n1: int = 0
    n2: int = 0
    reason: str | None = None
    mean1: float | None = None
    mean2: float | None = None
    diff_mean: float | None = None
    t_stat: float | None = None
    df: float | None = None
    p_value: float | None = None
    conf_level: float | None = None
    conf_low: float | None = None
    conf_high: float | None = None
    caveat: str = field(default=SERIAL_CORRELATION_CAVEAT)

    @property
    def skipped(self) -> bool:
        return self.status != "ok"

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(self)])


@dataclass(frozen=True)
class ReturnAnalysis:
    enriched: pd.DataFrame
    summary: pd.DataFrame
    joint_summary: pd.DataFrame
    bond_proxy_summary: pd.DataFrame
    ttest: TTestResult
