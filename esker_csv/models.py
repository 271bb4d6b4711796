from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class Site(str, Enum):
    PC1 = "PC1"
    P11 = "P11"


class DateMode(str, Enum):
    WITH_TIME = "with_time"
    DATE_ONLY = "date_only"


@dataclass(frozen=True)
class ColumnSpec:
    index: int  # 1-based
    mode: DateMode


@dataclass(frozen=True)
class FieldSpan:
    prefix: str
    target: str
    suffix: str


@dataclass(frozen=True)
class DateValue:
    day: str
    month: str
    year: str
    time: Optional[str] = None

    def iso(self) -> str:
        return f"{self.year}-{self.month}-{self.day}"


@dataclass(frozen=True)
class LineTransformResult:
    text: str
    changed: bool


@dataclass(frozen=True)
class LineTally:
    total: int = 0
    changed: int = 0
    unchanged: int = 0

    def add(self, result: LineTransformResult) -> "LineTally":
        if result.changed:
            return replace(self, total=self.total + 1, changed=self.changed + 1)
        return replace(self, total=self.total + 1, unchanged=self.unchanged + 1)


class FileOutcome(BaseModel):
    success: bool
    source_path: Path
    output_path: Optional[Path] = None
    site: Optional[Site] = None
    total_lines: int = 0
    changed_lines: int = 0
    unchanged_lines: int = 0
    error: Optional[str] = None


class RunSummary(BaseModel):
    run_date: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    outcomes: List[FileOutcome] = Field(default_factory=list)
    processed: List[Path] = Field(default_factory=list)
    failed: List[Path] = Field(default_factory=list)
    unresolved: List[Path] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.unresolved


class ConvertedCsv(BaseModel):
    filename: str
    sha256: str
    encoding: str = Field(default="utf-8")
    content_b64: str


class LineStats(BaseModel):
    total: int = 0
    changed: int = 0
    unchanged: int = 0


class ConvertResponse(BaseModel):
    site: Site
    source_encoding: Optional[str] = Field(default=None, examples=["utf-8"])
    converted_csv: ConvertedCsv
    lines: LineStats


class HealthResponse(BaseModel):
    ok: bool = True
