from __future__ import annotations

import logging
import re
from itertools import islice
from pathlib import Path
from typing import Iterable, List, Optional

from .models import Site
from .rules import DETECTION_HEAD_LINES, DETECTION_TOKENS

logger = logging.getLogger(__name__)

# Search order matters: PC1 wins over P11 when both appear.
_SITE_PATTERNS = [
    (Site.PC1, re.compile(r"\bPC1\b", re.IGNORECASE)),
    (Site.P11, re.compile(r"\bP11\b", re.IGNORECASE)),
]


def search_site(text: str) -> Optional[Site]:
    for site, pattern in _SITE_PATTERNS:
        if pattern.search(text):
            return site
    return None


def _first_row_probe(head_lines: List[str]) -> str:
    # Deliberately naive split: quotes are ignored on this path.
    if len(head_lines) < 2:
        return ""
    tokens = head_lines[1].rstrip("\r\n").split(",")[:DETECTION_TOKENS]
    return " ".join(tokens)


def detect_site_from_text(filename: str, head_lines: Iterable[str], default: Site) -> Site:
    """Classify from a filename and the first lines of its content."""
    site = search_site(filename)
    if site is not None:
        return site

    head = list(islice(head_lines, DETECTION_HEAD_LINES))
    site = search_site(_first_row_probe(head))
    if site is not None:
        return site

    return default


def detect_site(path: Path, default: Site, encoding: str = "utf-8") -> Site:
    """
    Classify a source file as PC1 or P11.

    The filename is checked first; only if it is inconclusive is the file
    opened, and then only the header plus up to two data rows are read.
    """
    site = search_site(path.name)
    if site is not None:
        logger.debug("site %s from filename %s", site.value, path.name)
        return site

    with path.open("r", encoding=encoding, newline="") as f:
        head = list(islice(f, DETECTION_HEAD_LINES))

    site = search_site(_first_row_probe(head))
    if site is None:
        logger.debug("site for %s not found, using default %s", path.name, default.value)
        return default
    return site
