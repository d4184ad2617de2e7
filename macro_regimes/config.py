from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    FRED_API_KEY: str | None = None

    # Where data/ and output/ live. Defaults to the current working directory.
    MACRO_REGIMES_PROJECT_DIR: str | None = None
    MACRO_REGIMES_CACHE_DIR: str | None = None

    # Pull window (set wide; analysis stages use the whole sample)
    MACRO_REGIMES_START_DATE: str = "1990-01-01"
    MACRO_REGIMES_END_DATE: str | None = None

    @property
    def fred_api_key(self) -> str | None:
        return self.FRED_API_KEY

    @property
    def project_dir(self) -> Path:
        return Path(self.MACRO_REGIMES_PROJECT_DIR or Path.cwd())

    @property
    def cache_dir(self) -> Path:
        if self.MACRO_REGIMES_CACHE_DIR:
            return Path(self.MACRO_REGIMES_CACHE_DIR)
        return self.project_dir / "data" / "cache" / "fred"

    @property
    def start_date(self) -> str:
        return self.MACRO_REGIMES_START_DATE

    @property
    def end_date(self) -> str:
        return self.MACRO_REGIMES_END_DATE or date.today().isoformat()


class PanelColumns(BaseModel):
    """Maps analysis roles onto panel column names (FRED ids by default)."""

    policy_rate: str = "EFFR"
    cpi: str = "CPIAUCSL"
    equity: str = "SP500"
    long_yield: str = "DGS10"
    short_yield: str = "TB3MS"

    def series_ids(self) -> list[str]:
        return [self.policy_rate, self.cpi, self.equity, self.long_yield, self.short_yield]


class RegimeConfig(BaseModel):
    # Direction regime uses a fixed +/- band on the 12m change (percentage points)
    direction_threshold_pp: float = 0.25
    lag_months: int = 12

    # Percentile regimes (rate level, inflation)
    lower_quantile: float = 0.25
    upper_quantile: float = 0.75
    min_threshold_obs: int = 24  # two years of monthly data

    # Annualization assumes i.i.d. monthly returns
    periods_per_year: int = 12

    # Two-sample test on equity returns
    ttest_group1: str = "Rising"
    ttest_group2: str = "Falling"
    ttest_min_obs: int = 30
    ttest_confidence: float = 0.95


@dataclass(frozen=True)
class ProjectDirs:
    raw: Path
    processed: Path
    tables: Path
    figures: Path

    @classmethod
    def under(cls, project_dir: str | Path) -> "ProjectDirs":
        root = Path(project_dir)
        return cls(
            raw=root / "data" / "raw",
            processed=root / "data" / "processed",
            tables=root / "output" / "tables",
            figures=root / "output" / "figures",
        )

    def ensure(self) -> "ProjectDirs":
        for p in (self.raw, self.processed, self.tables, self.figures):
            p.mkdir(parents=True, exist_ok=True)
        return self


def load_settings() -> Settings:
    return Settings()
