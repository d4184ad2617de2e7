"""Fatal pipeline errors.

Per-record problems (a missing CPI print, a thin threshold sample, a skipped
t-test) never raise; they show up as missing values or `status="skipped"`.
The exceptions here are for structural failures that stop a stage.
"""
from __future__ import annotations


class PanelValidationError(ValueError):
    """Input table is missing required columns or cannot be ordered by date."""


class SeriesStoreError(RuntimeError):
    """The series store returned nothing usable."""
