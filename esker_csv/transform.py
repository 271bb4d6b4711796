from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from .dates import rewrite_field
from .fields import FieldLocator
from .models import ColumnSpec, DateMode, LineTally, LineTransformResult

logger = logging.getLogger(__name__)


def build_column_specs(cols_with_time: Iterable[int], cols_date_only: Iterable[int]) -> List[ColumnSpec]:
    """With-time columns first, then date-only, each in increasing index order."""
    specs = [ColumnSpec(i, DateMode.WITH_TIME) for i in sorted(set(cols_with_time))]
    specs += [ColumnSpec(i, DateMode.DATE_ONLY) for i in sorted(set(cols_date_only))]
    return specs


class LineTransformer:
    """
    Rewrites the configured date columns of one CSV line at a time.

    Locators are compiled once here and reused for every line of every file.
    """

    def __init__(self, cols_with_time: Iterable[int], cols_date_only: Iterable[int]):
        self.specs = build_column_specs(cols_with_time, cols_date_only)
        self.locators = [FieldLocator(spec) for spec in self.specs]
        logger.debug("column table: %s", self.locators)

    def rewrite_column(self, line: str, locator: FieldLocator) -> str:
        span = locator.locate(line)
        if span is None:
            return line
        new_target, matched = rewrite_field(span.target, locator.spec.mode)
        if not matched:
            return line
        return span.prefix + new_target + span.suffix

    def transform(self, line: str, is_header: bool = False) -> LineTransformResult:
        if is_header:
            return LineTransformResult(line, changed=False)

        text = line
        for locator in self.locators:
            text = self.rewrite_column(text, locator)
        return LineTransformResult(text, changed=text != line)

    def transform_lines(self, lines: Iterable[str]) -> Tuple[List[str], LineTally]:
        """In-memory variant: first line is the header; terminators must be stripped."""
        out: List[str] = []
        tally = LineTally()
        for i, line in enumerate(lines):
            result = self.transform(line, is_header=(i == 0))
            out.append(result.text)
            tally = tally.add(result)
        return out, tally
