from __future__ import annotations

import logging
from typing import Iterable

import pandas as pd

from macro_regimes.errors import PanelValidationError

logger = logging.getLogger(__name__)


def month_end(dates: pd.Series) -> pd.Series:
    """Map any timestamp onto its calendar month-end (midnight)."""
    return pd.to_datetime(dates).dt.to_period("M").dt.to_timestamp(how="end").dt.normalize()


def validate_panel(df: pd.DataFrame, required: Iterable[str]) -> None:
    """
    Structural checks that must pass before any lag-based computation.

    Raises PanelValidationError when required columns are missing, when dates
    cannot be parsed or repeat, or when the dates are not a complete
    month-end grid. Lags are positional, so a skipped month has to be a row of
    missing values rather than an absent row.
    """
    required = list(required)
    missing_cols = [c for c in ["date", *required] if c not in df.columns]
    if missing_cols:
        raise PanelValidationError(f"Missing required columns: {', '.join(dict.fromkeys(missing_cols))}")

    try:
        dates = pd.to_datetime(df["date"])
    except (TypeError, ValueError) as e:
        raise PanelValidationError(f"Column 'date' is not parseable as dates: {e}") from e
    if dates.isna().any():
        raise PanelValidationError(f"Column 'date' has {int(dates.isna().sum())} missing values")
    if dates.duplicated().any():
        dupes = sorted({d.strftime("%Y-%m-%d") for d in dates[dates.duplicated()]})
        raise PanelValidationError(f"Duplicate dates in panel: {', '.join(dupes[:5])}")
    if dates.empty:
        return

    off_grid = dates[dates != month_end(dates)]
    if not off_grid.empty:
        shown = sorted({d.strftime("%Y-%m-%d") for d in off_grid})
        raise PanelValidationError(f"Panel dates are not calendar month-ends: {', '.join(shown[:5])}")

    grid = pd.date_range(dates.min(), dates.max(), freq="ME")
    absent = grid.difference(pd.DatetimeIndex(dates))
    if len(absent):
        shown = [d.strftime("%Y-%m-%d") for d in absent[:5]]
        raise PanelValidationError(
            f"Panel skips {len(absent)} month(s) ({', '.join(shown)}); gaps must be rows of missing values"
        )


def sort_panel(df: pd.DataFrame) -> pd.DataFrame:
    """Copy of the panel with parsed dates, ascending, fresh index."""
    out = df.copy()
    out["date"] = pd.to_datetime(out["date"])
    return out.sort_values("date", kind="mergesort").reset_index(drop=True)


def to_monthly_panel(long_df: pd.DataFrame, series_ids: Iterable[str] | None = None) -> pd.DataFrame:
    """
    Long table (date, value, series) -> wide monthly panel.

    Daily series are reduced to their month-end observation (last non-missing
    value in the month). Monthly series dated at month start land on the same
    month-end key. Months with no observation for any series are kept as
    rows of missing values so that positional lags equal calendar lags.
    """
    missing_cols = [c for c in ("date", "value", "series") if c not in long_df.columns]
    if missing_cols:
        raise PanelValidationError(f"Missing required columns: {', '.join(missing_cols)}")
    if long_df.empty:
        raise PanelValidationError("Cannot build a monthly panel from an empty series table")

    tmp = long_df[["date", "value", "series"]].copy()
    tmp["value"] = pd.to_numeric(tmp["value"], errors="coerce")
    tmp["date"] = month_end(tmp["date"])
    tmp = tmp.dropna(subset=["value"])

    monthly = (
        tmp.sort_values(["series", "date"], kind="mergesort")
        .groupby(["series", "date"], as_index=False)["value"]
        .last()
    )
    wide = monthly.pivot(index="date", columns="series", values="value")
    wide.columns.name = None

    ids = list(series_ids) if series_ids is not None else sorted(long_df["series"].unique())
    for sid in ids:
        if sid not in wide.columns:
            logger.warning("Series %s has no observations; panel column will be empty", sid)
            wide[sid] = float("nan")

    all_dates = month_end(pd.Series(long_df["date"]))
    grid = pd.date_range(all_dates.min(), all_dates.max(), freq="ME")
    wide = wide.reindex(grid)[ids]
    wide.index.name = "date"
    return wide.reset_index()


def panel_qa_summary(panel: pd.DataFrame) -> pd.DataFrame:
    """One-row QA summary: date coverage and missing count per series."""
    row: dict[str, object] = {
        "min_date": panel["date"].min(),
        "max_date": panel["date"].max(),
        "n_months": int(len(panel)),
    }
    for c in panel.columns:
        if c == "date":
            continue
        row[f"missing_{c}"] = int(panel[c].isna().sum())
    return pd.DataFrame([row])
