from __future__ import annotations

import math
from typing import Any

import pandas as pd

from macro_regimes.config import PanelColumns, RegimeConfig
from macro_regimes.regimes.models import (
    INFLATION_LABELS,
    JOINT_SEPARATOR,
    RATE_LEVEL_LABELS,
    PercentileBand,
    RegimeThresholds,
)

_DEFAULTS = RegimeConfig()


def _value(x: Any) -> float | None:
    """Float, or None for anything missing / non-finite."""
    if x is None:
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def _label(x: Any) -> str | None:
    if x is None or (isinstance(x, float) and math.isnan(x)) or x is pd.NA:
        return None
    return str(x)


def classify_direction(change_pp: Any, band: float = _DEFAULTS.direction_threshold_pp) -> str | None:
    """Rising above +band, Falling below -band, Stable inside it; None if undefined."""
    v = _value(change_pp)
    if v is None:
        return None
    if v > band:
        return "Rising"
    if v < -band:
        return "Falling"
    return "Stable"


def classify_band(value: Any, band: PercentileBand, labels: tuple[str, str, str]) -> str | None:
    """(low, middle, high) label versus percentile cut-offs; None if value or band undefined."""
    v = _value(value)
    if v is None or not band.is_defined:
        return None
    low, mid, high = labels
    if v < band.lower:  # type: ignore[operator]
        return low
    if v > band.upper:  # type: ignore[operator]
        return high
    return mid


def join_regimes(inflation: Any, direction: Any) -> str | None:
    """'<inflation> + <direction>', defined only when both parts are."""
    i, d = _label(inflation), _label(direction)
    if i is None or d is None:
        return None
    return f"{i}{JOINT_SEPARATOR}{d}"


def classify_regimes(
    df: pd.DataFrame,
    thresholds: RegimeThresholds,
    columns: PanelColumns | None = None,
) -> pd.DataFrame:
    """
    Label every record independently against the precomputed thresholds.

    Expects `rate_change_12m` and `inflation_yoy` already derived. Returns a
    new frame with four object-dtype label columns; undefined labels are None.
    """
    columns = columns or PanelColumns()
    out = df.copy()

    direction = [classify_direction(v, thresholds.direction_pp) for v in out["rate_change_12m"]]
    level = [classify_band(v, thresholds.rate_level, RATE_LEVEL_LABELS) for v in out[columns.policy_rate]]
    inflation = [classify_band(v, thresholds.inflation, INFLATION_LABELS) for v in out["inflation_yoy"]]
    joint = [join_regimes(i, d) for i, d in zip(inflation, direction)]

    out["rate_direction_regime"] = pd.Series(direction, index=out.index, dtype="object")
    out["rate_level_regime"] = pd.Series(level, index=out.index, dtype="object")
    out["inflation_regime"] = pd.Series(inflation, index=out.index, dtype="object")
    out["joint_regime"] = pd.Series(joint, index=out.index, dtype="object")
    return out
