"""Command registrations for the Typer CLI.

`macro_regimes/cli.py` stays the entrypoint module (pyproject points the
script at `macro_regimes.cli:app`); stage commands live here and are
registered from it.
"""
