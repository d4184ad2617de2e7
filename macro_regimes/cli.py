"""
Macro regimes CLI

Stages (each reads the previous stage's output from the project dir):
- macro-regimes pull / panel / classify / returns / figures
- macro-regimes run
"""
from __future__ import annotations

import typer

app = typer.Typer(
    add_completion=False,
    help="""Macro regimes: interest-rate / inflation regimes vs asset returns

\b
PIPELINE
  macro-regimes pull         Pull FRED series (cached)
  macro-regimes panel        Month-end panel + QA table
  macro-regimes classify     Inflation, rate changes, regime labels
  macro-regimes returns      Returns, regime summaries, Welch t-test
  macro-regimes figures      PNG charts
  macro-regimes run          All of the above

\b
Run 'macro-regimes <command> --help' for details.
""",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    from macro_regimes.utils.logging import setup_logging

    setup_logging(verbose=verbose)


# ---------------------------------------------------------------------------
# COMMAND REGISTRATION
# ---------------------------------------------------------------------------

_COMMANDS_REGISTERED = False


def _register_commands() -> None:
    global _COMMANDS_REGISTERED
    if _COMMANDS_REGISTERED:
        return

    from macro_regimes.cli_commands.pipeline_cmd import register as register_pipeline

    register_pipeline(app)

    _COMMANDS_REGISTERED = True


def main():
    _register_commands()
    app()


# Register on import
_register_commands()


if __name__ == "__main__":
    main()
