"""
Recognize DD/MM/YYYY dates in a single CSV field and re-emit them as ISO dates.

This is a textual reformatter, not a calendar: digit groups are copied through
as captured, so 31/13/2023 becomes 2023-13-31.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from .models import DateMode, DateValue

DATE_PATTERN = r"[0-9]{2}/[0-9]{2}/[0-9]{4}"
TIME_SUFFIX_PATTERN = r"\s+[0-9]{2}:[0-9]{2}:[0-9]{2}"

# Bare (unquoted) shape of a date field per mode; fields.py builds on these.
FIELD_SHAPES: Dict[DateMode, str] = {
    DateMode.WITH_TIME: DATE_PATTERN + f"(?:{TIME_SUFFIX_PATTERN})?",
    DateMode.DATE_ONLY: DATE_PATTERN,
}

_PARSERS: Dict[DateMode, "re.Pattern[str]"] = {
    DateMode.WITH_TIME: re.compile(
        r"(?P<day>[0-9]{2})/(?P<month>[0-9]{2})/(?P<year>[0-9]{4})"
        r"(?P<time>\s+[0-9]{2}:[0-9]{2}:[0-9]{2})?"
    ),
    DateMode.DATE_ONLY: re.compile(
        r"(?P<day>[0-9]{2})/(?P<month>[0-9]{2})/(?P<year>[0-9]{4})"
    ),
}


def _unquote(text: str) -> Tuple[str, bool]:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1], True
    return text, False


def parse_date(text: str, mode: DateMode) -> Optional[DateValue]:
    """Parse a raw field (quotes allowed) into its digit groups, or None."""
    inner, _ = _unquote(text)
    m = _PARSERS[mode].fullmatch(inner)
    if m is None:
        return None
    time = m.groupdict().get("time")
    return DateValue(
        day=m.group("day"),
        month=m.group("month"),
        year=m.group("year"),
        time=time.strip() if time else None,
    )


def rewrite_field(text: str, mode: DateMode) -> Tuple[str, bool]:
    """
    Rewrite one raw field to YYYY-MM-DD.

    Returns (new_text, matched). The time-of-day suffix is always dropped and
    the field is re-quoted only if it came in quoted. A field that does not
    parse is returned as-is with matched=False.
    """
    value = parse_date(text, mode)
    if value is None:
        return text, False

    _, quoted = _unquote(text)
    iso = value.iso()
    return (f'"{iso}"' if quoted else iso), True
