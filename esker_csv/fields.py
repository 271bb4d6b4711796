"""
Positional field lookup on raw CSV lines.

A locator matches a line up to and including field N, provided field N has the
date shape for its mode. Quoted fields before N may contain commas; they are
skipped as whole units. Nothing else on the line is parsed.
"""

from __future__ import annotations

import re
from typing import Optional

from .dates import FIELD_SHAPES
from .models import ColumnSpec, DateMode, FieldSpan

# A quoted run (with "" escapes) or an unquoted run that does not open a quote.
FIELD_PATTERN = r'(?:"(?:[^"]|"")*"|[^",][^,]*|)'


def build_pattern(index: int, mode: DateMode) -> "re.Pattern[str]":
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")

    shape = FIELD_SHAPES[mode]
    target = f'"{shape}"|{shape}(?=,|$)'
    return re.compile(
        rf"^(?P<prefix>(?:{FIELD_PATTERN},){{{index - 1}}})(?P<target>{target})"
    )


class FieldLocator:
    """Compiled lookup for one configured column."""

    def __init__(self, spec: ColumnSpec):
        self.spec = spec
        self.pattern = build_pattern(spec.index, spec.mode)

    def locate(self, line: str) -> Optional[FieldSpan]:
        m = self.pattern.match(line)
        if m is None:
            return None
        return FieldSpan(
            prefix=m.group("prefix"),
            target=m.group("target"),
            suffix=line[m.end("target"):],
        )

    def __repr__(self) -> str:
        return f"FieldLocator(index={self.spec.index}, mode={self.spec.mode.value})"
