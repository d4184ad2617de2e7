"""Pipeline stage commands: pull, panel, classify, returns, figures, run."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import typer
from rich.console import Console

from macro_regimes.config import ProjectDirs, RegimeConfig, load_settings
from macro_regimes.errors import PanelValidationError, SeriesStoreError

console = Console()

T = TypeVar("T")

_FATAL = (PanelValidationError, SeriesStoreError, FileNotFoundError, RuntimeError)


def _dirs(project_dir: Path | None) -> ProjectDirs:
    root = project_dir if project_dir is not None else load_settings().project_dir
    return ProjectDirs.under(root).ensure()


def _guard(fn: Callable[[], T]) -> T:
    """Run a stage; structural failures print in red and exit non-zero."""
    try:
        return fn()
    except _FATAL as e:
        console.print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(code=1) from e


def register(app: typer.Typer) -> None:
    from macro_regimes.cli_commands.shared import display

    def project_opt():
        return typer.Option(None, "--project-dir", "-p", help="Project root (default: MACRO_REGIMES_PROJECT_DIR or cwd)")

    @app.command("pull")
    def pull_cmd(
        project_dir: Path = project_opt(),
        start: str = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
        end: str = typer.Option(None, "--end", help="End date YYYY-MM-DD (default: today)"),
        refresh: bool = typer.Option(False, "--refresh", help="Ignore the FRED cache"),
    ):
        """Pull macro + asset proxy series from FRED."""
        from macro_regimes.pipeline import run_pull

        settings = load_settings()
        dirs = _dirs(project_dir)
        long_df, out = _guard(lambda: run_pull(settings, dirs, start_date=start, end_date=end, refresh=refresh))
        console.print(f"Pulled {long_df['series'].nunique()} series, {len(long_df):,} observations")
        console.print(display.paths_table("Saved", out.paths))

    @app.command("panel")
    def panel_cmd(project_dir: Path = project_opt()):
        """Align pulled series onto a month-end grid."""
        from macro_regimes.panel.builder import panel_qa_summary
        from macro_regimes.pipeline import run_panel

        dirs = _dirs(project_dir)
        panel, out = _guard(lambda: run_panel(dirs))
        console.print(display.qa_table(panel_qa_summary(panel)))
        console.print(display.paths_table("Saved", out.paths))

    @app.command("classify")
    def classify_cmd(
        project_dir: Path = project_opt(),
        band: float = typer.Option(0.25, "--band", help="Direction band on 12m rate change (pp)"),
    ):
        """Derive inflation / rate changes and label regimes."""
        from macro_regimes.pipeline import run_classify

        dirs = _dirs(project_dir)
        config = RegimeConfig(direction_threshold_pp=band)
        result, out = _guard(lambda: run_classify(dirs, config=config))
        console.print(display.thresholds_table(result.threshold_report))
        console.print(display.counts_table(result.counts))
        console.print(display.paths_table("Saved", out.paths))

    @app.command("returns")
    def returns_cmd(
        project_dir: Path = project_opt(),
        min_obs: int = typer.Option(30, "--min-obs", help="Minimum combined observations for the t-test"),
    ):
        """Compute monthly returns, regime summaries and the Rising vs Falling test."""
        from macro_regimes.pipeline import run_returns

        dirs = _dirs(project_dir)
        config = RegimeConfig(ttest_min_obs=min_obs)
        analysis, out = _guard(lambda: run_returns(dirs, config=config))
        individual = analysis.summary[analysis.summary["regime_type"] != "joint_regime"]
        console.print(display.summary_table(individual))
        console.print(display.summary_table(analysis.joint_summary, title="Equity returns by joint regime"))
        console.print(display.ttest_panel(analysis.ttest))
        console.print(display.paths_table("Saved", out.paths))

    @app.command("figures")
    def figures_cmd(project_dir: Path = project_opt()):
        """Render PNG charts from the return-enriched table."""
        from macro_regimes.pipeline import run_figures

        dirs = _dirs(project_dir)
        out = _guard(lambda: run_figures(dirs))
        console.print(display.paths_table("Figures", out.paths))

    @app.command("run")
    def run_cmd(
        project_dir: Path = project_opt(),
        start: str = typer.Option(None, "--start", help="Start date YYYY-MM-DD"),
        end: str = typer.Option(None, "--end", help="End date YYYY-MM-DD (default: today)"),
        refresh: bool = typer.Option(False, "--refresh", help="Ignore the FRED cache"),
        skip_pull: bool = typer.Option(False, "--skip-pull", help="Reuse data/raw from a previous pull"),
    ):
        """Run every stage end to end."""
        from macro_regimes.pipeline import run_all
        from macro_regimes.utils.logging import log_event

        settings = load_settings()
        dirs = _dirs(project_dir)
        outputs = _guard(
            lambda: run_all(settings, dirs, start_date=start, end_date=end, refresh=refresh, skip_pull=skip_pull)
        )
        log_event("pipeline.complete", {o.name: [str(p) for p in o.paths] for o in outputs})
