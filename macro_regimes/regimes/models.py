from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

# Label sets in display order. A missing value in a regime column means Undefined.
RATE_DIRECTION_LABELS = ("Falling", "Stable", "Rising")
RATE_LEVEL_LABELS = ("Low", "Mid", "High")
INFLATION_LABELS = ("Low", "Moderate", "High")
JOINT_SEPARATOR = " + "
JOINT_LABELS = tuple(
    f"{infl}{JOINT_SEPARATOR}{direction}" for infl in INFLATION_LABELS for direction in RATE_DIRECTION_LABELS
)

MISSING_LABEL = "Missing"

REGIME_LABELS: dict[str, tuple[str, ...]] = {
    "rate_direction_regime": RATE_DIRECTION_LABELS,
    "rate_level_regime": RATE_LEVEL_LABELS,
    "inflation_regime": INFLATION_LABELS,
    "joint_regime": JOINT_LABELS,
}
REGIME_COLUMNS = tuple(REGIME_LABELS)


@dataclass(frozen=True)
class PercentileBand:
    """Lower/upper percentile cut-offs; both None when the sample was too thin."""
    lower: float | None
    upper: float | None
    n_obs: int

    @property
    def is_defined(self) -> bool:
        return self.lower is not None and self.upper is not None


@dataclass(frozen=True)
class RegimeThresholds:
    """Full-sample thresholds, computed once and passed into every classification."""
    rate_level: PercentileBand
    inflation: PercentileBand
    direction_pp: float


@dataclass(frozen=True)
class RegimeClassification:
    tagged: pd.DataFrame
    thresholds: RegimeThresholds
    threshold_report: pd.DataFrame
    counts: pd.DataFrame
    counts_summary: pd.DataFrame
