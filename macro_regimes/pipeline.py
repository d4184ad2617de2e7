"""
Stage runners: each reads the previous stage's table from disk, transforms
it, and writes its own outputs under the project directory.

    pull -> panel -> classify -> returns -> figures
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from macro_regimes.config import PanelColumns, ProjectDirs, RegimeConfig, Settings
from macro_regimes.data import store
from macro_regimes.data.fred import FredClient, pull_series
from macro_regimes.panel.builder import panel_qa_summary, to_monthly_panel
from macro_regimes.regimes.models import RegimeClassification
from macro_regimes.regimes.signals import build_regime_table
from macro_regimes.report.figures import render_all
from macro_regimes.returns.models import ReturnAnalysis
from macro_regimes.returns.signals import build_return_tables

logger = logging.getLogger(__name__)


@dataclass
class StageOutput:
    name: str
    paths: list[Path] = field(default_factory=list)


def run_pull(
    settings: Settings,
    dirs: ProjectDirs,
    columns: PanelColumns | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    refresh: bool = False,
    client: FredClient | None = None,
) -> tuple[pd.DataFrame, StageOutput]:
    columns = columns or PanelColumns()
    if client is None:
        if not settings.fred_api_key:
            raise RuntimeError("Missing FRED_API_KEY in environment / .env")
        client = FredClient(api_key=settings.fred_api_key, cache_dir=settings.cache_dir)

    long_df = pull_series(
        client,
        columns.series_ids(),
        start_date=start_date or settings.start_date,
        end_date=end_date or settings.end_date,
        refresh=refresh,
    )
    out = StageOutput("pull", [store.write_table(long_df, store.raw_path(dirs))])
    return long_df, out


def run_panel(dirs: ProjectDirs, columns: PanelColumns | None = None) -> tuple[pd.DataFrame, StageOutput]:
    columns = columns or PanelColumns()
    long_df = store.read_table(store.raw_path(dirs), stage_hint="macro-regimes pull")
    panel = to_monthly_panel(long_df, columns.series_ids())
    qa = panel_qa_summary(panel)
    out = StageOutput(
        "panel",
        [
            store.write_table(panel, store.panel_path(dirs)),
            store.write_table(qa, store.table_path(dirs, store.PANEL_QA)),
        ],
    )
    return panel, out


def run_classify(
    dirs: ProjectDirs,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
) -> tuple[RegimeClassification, StageOutput]:
    panel = store.read_table(store.panel_path(dirs), stage_hint="macro-regimes panel")
    result = build_regime_table(panel, config=config, columns=columns)
    out = StageOutput(
        "classify",
        [
            store.write_table(result.tagged, store.regimes_path(dirs)),
            store.write_table(result.threshold_report, store.table_path(dirs, store.REGIME_THRESHOLDS)),
            store.write_table(result.counts, store.table_path(dirs, store.REGIME_COUNTS)),
            store.write_table(result.counts_summary, store.table_path(dirs, store.REGIME_COUNTS_SUMMARY)),
        ],
    )
    return result, out


def run_returns(
    dirs: ProjectDirs,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
) -> tuple[ReturnAnalysis, StageOutput]:
    tagged = store.read_table(store.regimes_path(dirs), stage_hint="macro-regimes classify")
    analysis = build_return_tables(tagged, config=config, columns=columns)
    paths = [
        store.write_table(analysis.enriched, store.returns_path(dirs)),
        store.write_table(analysis.summary, store.table_path(dirs, store.RETURNS_SUMMARY)),
        store.write_table(analysis.joint_summary, store.table_path(dirs, store.JOINT_SUMMARY)),
        store.write_table(analysis.bond_proxy_summary, store.table_path(dirs, store.BOND_PROXY_SUMMARY)),
        store.write_table(analysis.ttest.to_frame(), store.table_path(dirs, store.TTEST_RESULT)),
    ]
    return analysis, StageOutput("returns", paths)


def run_figures(dirs: ProjectDirs, columns: PanelColumns | None = None) -> StageOutput:
    enriched = store.read_table(store.returns_path(dirs), stage_hint="macro-regimes returns")
    return StageOutput("figures", render_all(enriched, dirs.figures, columns=columns))


def run_all(
    settings: Settings,
    dirs: ProjectDirs,
    config: RegimeConfig | None = None,
    columns: PanelColumns | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    refresh: bool = False,
    skip_pull: bool = False,
    client: FredClient | None = None,
) -> list[StageOutput]:
    """Run every stage in order; `skip_pull` reuses data/raw from a previous pull."""
    dirs.ensure()
    outputs: list[StageOutput] = []
    if not skip_pull:
        _, o = run_pull(settings, dirs, columns, start_date=start_date, end_date=end_date, refresh=refresh, client=client)
        outputs.append(o)
    outputs.append(run_panel(dirs, columns)[1])
    outputs.append(run_classify(dirs, config, columns)[1])
    outputs.append(run_returns(dirs, config, columns)[1])
    outputs.append(run_figures(dirs, columns))
    logger.info("Pipeline complete: %s", ", ".join(o.name for o in outputs))
    return outputs
