"""
Pytest configuration and shared fixtures for macro_regimes tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Import helpers from conftest when needed (`from conftest import make_panel`).
"""
import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest


def pytest_configure():
    """
    Ensure the repo root is on sys.path so `macro_regimes` imports without
    requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


# =============================================================================
# Synthetic Panel Helpers
# =============================================================================

def make_panel(n_months: int = 60, start: str = "2000-01-31", **overrides) -> pd.DataFrame:
    """
    Month-end panel with the five default columns.

    Defaults are deterministic but not constant, so percentile thresholds
    split the sample into all three buckets. Pass an array / list / scalar per
    column to override.
    """
    i = np.arange(n_months)
    data = {
        "date": pd.date_range(start, periods=n_months, freq="ME"),
        # rate cycles up and down over ~4 years
        "EFFR": 3.0 + 2.0 * np.sin(2 * np.pi * i / 48.0),
        # CPI with slowly varying monthly inflation
        "CPIAUCSL": 100.0 * np.cumprod(1.0 + 0.002 + 0.0015 * np.sin(2 * np.pi * i / 30.0)),
        "SP500": 1000.0 * np.exp(np.cumsum(0.005 + 0.03 * np.sin(i * 1.7))),
        "DGS10": 4.0 + 0.5 * np.cos(2 * np.pi * i / 24.0),
        "TB3MS": 2.0 + 0.2 * np.sin(2 * np.pi * i / 12.0),
    }
    data.update(overrides)
    return pd.DataFrame(data)


def make_long(panel: pd.DataFrame) -> pd.DataFrame:
    """Wide panel -> long (date, value, series) table, as the pull stage writes it."""
    return (
        panel.melt(id_vars="date", var_name="series", value_name="value")[["date", "value", "series"]]
        .reset_index(drop=True)
    )


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def synthetic_panel() -> pd.DataFrame:
    """Five years of month-end data for all default series."""
    return make_panel(60)


@pytest.fixture
def rising_rate_panel() -> pd.DataFrame:
    """36 months, policy rate up 0.5pp every 12 months."""
    i = np.arange(36)
    return make_panel(36, EFFR=1.0 + 0.5 * i / 12.0)


@pytest.fixture
def tagged_panel(synthetic_panel):
    """Regime-tagged version of `synthetic_panel`."""
    from macro_regimes.regimes.signals import build_regime_table

    return build_regime_table(synthetic_panel).tagged


class FakeFredClient:
    """Stands in for FredClient: serves series out of an in-memory panel."""

    def __init__(self, panel: pd.DataFrame, fail: tuple[str, ...] = ()):
        self.panel = panel
        self.fail = set(fail)
        self.calls: list[str] = []

    def fetch_series(self, series_id, start_date="1990-01-01", end_date=None, refresh=False):
        self.calls.append(series_id)
        if series_id in self.fail:
            raise ConnectionError(f"boom: {series_id}")
        # monthly series arrive dated at the first of the month, like FRED
        dates = self.panel["date"] - pd.offsets.MonthBegin(1)
        return pd.DataFrame({"date": dates, "value": self.panel[series_id].to_numpy()})


@pytest.fixture
def fake_fred(synthetic_panel) -> FakeFredClient:
    return FakeFredClient(synthetic_panel)
