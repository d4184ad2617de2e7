from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pandas as pd

from macro_regimes.errors import SeriesStoreError

logger = logging.getLogger(__name__)

FRED_OBSERVATIONS_URL = "https://api.stlouisfed.org/fred/series/observations"


@dataclass(frozen=True)
class FredSeries:
    series_id: str
    frequency: str  # "daily" or "monthly"
    description: str = ""


DEFAULT_SERIES = {
    # macro / policy
    "EFFR": FredSeries("EFFR", "daily", "Effective Federal Funds Rate"),
    "CPIAUCSL": FredSeries("CPIAUCSL", "monthly", "CPI, all urban consumers (index level)"),
    # asset proxies (returns computed downstream)
    "SP500": FredSeries("SP500", "daily", "S&P 500 index level"),
    "DGS10": FredSeries("DGS10", "daily", "10Y Treasury constant maturity yield (%)"),
    "TB3MS": FredSeries("TB3MS", "monthly", "3M T-bill secondary market rate (%)"),
}


class FredClient:
    def __init__(self, api_key: str, cache_dir: str | Path = "data/cache/fred"):
        self.api_key = api_key
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _cache_path(self, series_id: str) -> Path:
        return self.cache_dir / f"{series_id}.csv"

    @staticmethod
    def _window(df: pd.DataFrame, start_ts: pd.Timestamp, end_ts: pd.Timestamp | None) -> pd.DataFrame:
        mask = df["date"] >= start_ts
        if end_ts is not None:
            mask &= df["date"] <= end_ts
        return df[mask].reset_index(drop=True)

    def _read_cache(self, cache_path: Path) -> pd.DataFrame:
        df = pd.read_csv(cache_path)
        df["date"] = pd.to_datetime(df["date"])
        return df

    def fetch_series(
        self,
        series_id: str,
        start_date: str = "1990-01-01",
        end_date: str | None = None,
        refresh: bool = False,
    ) -> pd.DataFrame:
        """
        Returns DataFrame with columns: date (datetime64), value (float).

        FRED marks missing observations with "."; those rows are kept with a
        missing value so the series keeps its calendar.
        """
        cache_path = self._cache_path(series_id)
        start_ts = pd.to_datetime(start_date)
        end_ts = pd.to_datetime(end_date) if end_date else None
        if cache_path.exists() and not refresh:
            df = self._read_cache(cache_path)
            if not df.empty:
                logger.debug("Using cached %s (%d rows)", series_id, len(df))
                return self._window(df, start_ts, end_ts)

        # Lazy import so unit tests / restricted environments can import this module
        # without triggering SSL/cert initialization.
        import requests
        from requests.exceptions import RequestException

        params = {
            "series_id": series_id,
            "api_key": self.api_key,
            "file_type": "json",
            "observation_start": start_date,
        }
        if end_date:
            params["observation_end"] = end_date
        last_err: Exception | None = None
        for attempt in range(3):
            try:
                r = requests.get(FRED_OBSERVATIONS_URL, params=params, timeout=30)
                r.raise_for_status()
                js = r.json()
                break
            except RequestException as e:
                logger.debug("FRED request for %s failed (attempt %d): %s", series_id, attempt + 1, e)
                last_err = e
        else:
            # Network failed; fall back to cache if available.
            if cache_path.exists():
                logger.warning("FRED unavailable for %s, falling back to cache", series_id)
                return self._window(self._read_cache(cache_path), start_ts, end_ts)
            raise last_err  # type: ignore[misc]

        rows = []
        for o in js.get("observations", []):
            v = o.get("value")
            try:
                value = float(v) if v not in (None, ".") else None
            except (TypeError, ValueError):
                value = None
            rows.append({"date": o.get("date"), "value": value})

        df = pd.DataFrame(rows, columns=["date", "value"])
        df["date"] = pd.to_datetime(df["date"])
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df = df.sort_values("date").reset_index(drop=True)

        df.to_csv(cache_path, index=False)
        return self._window(df, start_ts, end_ts)


def pull_series(
    client: FredClient,
    series_ids: Iterable[str],
    start_date: str,
    end_date: str | None = None,
    refresh: bool = False,
) -> pd.DataFrame:
    """
    Pull several series into one long table: date, value, series.

    A single failed series is dropped with a warning; if nothing at all comes
    back the run cannot continue.
    """
    frames: list[pd.DataFrame] = []
    for sid in series_ids:
        meta = DEFAULT_SERIES.get(sid)
        logger.info("Pulling: %s%s", sid, f" ({meta.description}, {meta.frequency})" if meta else "")
        try:
            df = client.fetch_series(sid, start_date=start_date, end_date=end_date, refresh=refresh)
        except Exception as e:
            logger.warning("Failed to pull %s: %s", sid, e)
            continue
        if df is None or df.empty:
            logger.warning("No observations returned for %s", sid)
            continue
        frames.append(df.assign(series=sid)[["date", "value", "series"]])

    if not frames:
        raise SeriesStoreError("No series were successfully pulled. Check FRED_API_KEY / network access.")

    return pd.concat(frames, ignore_index=True).sort_values(["series", "date"]).reset_index(drop=True)
