"""
CLI smoke tests - verify commands load and stages run from files on disk.

No network: the raw long table is written directly into a temp project dir
and every command runs downstream of it.
"""
from __future__ import annotations

import pytest
from typer.testing import CliRunner

from conftest import make_long, make_panel
from macro_regimes.config import ProjectDirs
from macro_regimes.data import store

runner = CliRunner()


@pytest.fixture
def project_with_raw(tmp_path):
    dirs = ProjectDirs.under(tmp_path).ensure()
    store.write_table(make_long(make_panel(60)), store.raw_path(dirs))
    return tmp_path


class TestCLIStructure:
    """Test that CLI commands are properly registered and accessible."""

    def test_cli_imports_without_error(self):
        from macro_regimes.cli import app
        assert app is not None

    def test_main_help(self):
        from macro_regimes.cli import app
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Macro regimes" in result.output

    @pytest.mark.parametrize("command", ["pull", "panel", "classify", "returns", "figures", "run"])
    def test_command_help(self, command):
        from macro_regimes.cli import app
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert "--project-dir" in result.output


class TestCLIStages:
    def test_stages_in_order(self, project_with_raw):
        from macro_regimes.cli import app

        for command in ("panel", "classify", "returns", "figures"):
            result = runner.invoke(app, [command, "--project-dir", str(project_with_raw)])
            assert result.exit_code == 0, result.output

        figures = ProjectDirs.under(project_with_raw).figures
        assert len(list(figures.glob("*.png"))) == 4

    def test_run_skip_pull(self, project_with_raw):
        from macro_regimes.cli import app

        result = runner.invoke(app, ["--verbose", "run", "--project-dir", str(project_with_raw), "--skip-pull"])
        assert result.exit_code == 0, result.output
        assert "pipeline.complete" in result.output

    def test_missing_upstream_exits_nonzero(self, tmp_path):
        from macro_regimes.cli import app

        result = runner.invoke(app, ["classify", "--project-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "FileNotFoundError" in result.output
