from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Site


class Settings(BaseSettings):
    """
    Runtime configuration, read from ESKER_* environment variables.

    List values are given as JSON, e.g. ESKER_COLS_WITH_TIME='[3, 4]'.
    """

    input_dir: Path = Path("data/input")
    output_dir: Path = Path("data/output")
    processed_dir: Path = Path("data/processed")
    failed_dir: Path = Path("data/failed")
    log_dir: Path = Path("data/logs")
    input_glob: str = "*.csv"

    default_site: Site = Site.PC1
    cols_with_time: List[int] = [3, 4]
    cols_date_only: List[int] = [11, 13]
    line_terminator: str = "\n"

    model_config = SettingsConfigDict(env_prefix="ESKER_", case_sensitive=False)

    @field_validator("cols_with_time", "cols_date_only")
    @classmethod
    def _positive_indices(cls, v: List[int]) -> List[int]:
        bad = [i for i in v if i < 1]
        if bad:
            raise ValueError(f"column indices are 1-based, got {bad}")
        return v

    @field_validator("line_terminator")
    @classmethod
    def _known_terminator(cls, v: str) -> str:
        if v not in ("\n", "\r\n"):
            raise ValueError("line_terminator must be '\\n' or '\\r\\n'")
        return v

    @model_validator(mode="after")
    def _disjoint_columns(self) -> "Settings":
        both = sorted(set(self.cols_with_time) & set(self.cols_date_only))
        if both:
            raise ValueError(f"columns configured as both with-time and date-only: {both}")
        return self

    def directories(self) -> List[Path]:
        return [self.input_dir, self.output_dir, self.processed_dir, self.failed_dir, self.log_dir]

    def ensure_directories(self) -> None:
        for d in self.directories():
            d.mkdir(parents=True, exist_ok=True)


def get_settings(**overrides) -> Settings:
    """Settings from the environment, with non-None keyword overrides applied on top."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
