from __future__ import annotations

import pandas as pd
import pytest

from macro_regimes.config import ProjectDirs
from macro_regimes.data import store
from macro_regimes.regimes.signals import build_regime_table
from macro_regimes.returns.signals import add_asset_returns


def test_project_dirs_layout(tmp_path):
    dirs = ProjectDirs.under(tmp_path).ensure()
    assert dirs.raw == tmp_path / "data" / "raw"
    assert dirs.figures == tmp_path / "output" / "figures"
    assert all(p.is_dir() for p in (dirs.raw, dirs.processed, dirs.tables, dirs.figures))
    assert store.regimes_path(dirs).name == store.WITH_REGIMES


def test_round_trip_keeps_undefined_labels(tmp_path, rising_rate_panel):
    tagged = build_regime_table(rising_rate_panel).tagged
    path = store.write_table(tagged, tmp_path / "tagged.csv")
    back = store.read_table(path)

    assert back["date"].dtype.kind == "M"
    assert back["rate_direction_regime"].iloc[:12].isna().all()
    assert (back["rate_direction_regime"].iloc[12:] == "Rising").all()
    assert back["inflation_yoy"].iloc[:12].isna().all()


def test_round_trip_restores_flag_columns(tmp_path, tagged_panel):
    enriched = add_asset_returns(tagged_panel)
    back = store.read_table(store.write_table(enriched, tmp_path / "returns.csv"))
    assert back["has_equity_return"].dtype == bool
    assert back["has_equity_return"].tolist() == enriched["has_equity_return"].tolist()


def test_read_missing_table_names_upstream_stage(tmp_path):
    with pytest.raises(FileNotFoundError, match="macro-regimes panel"):
        store.read_table(tmp_path / "nope.csv", stage_hint="macro-regimes panel")


def test_write_table_formats_dates(tmp_path):
    df = pd.DataFrame({"date": pd.to_datetime(["2020-01-31"]), "x": [1.0]})
    path = store.write_table(df, tmp_path / "sub" / "t.csv")
    assert path.read_text().splitlines()[1].startswith("2020-01-31,")
