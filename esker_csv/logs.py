from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

LOG_FORMAT = "%(asctime)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "esker_csv"


def run_log_path(log_dir: Path, started: datetime) -> Path:
    return log_dir / f"esker_csv_{started.strftime('%Y%m%d-%H%M%S')}.log"


@contextmanager
def run_logging(log_dir: Path, started: datetime, echo: bool = True) -> Iterator[Path]:
    """
    Route package log records to a fresh per-run file (and stderr) for the
    duration of the block. Handlers are removed and closed on exit.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    path = run_log_path(log_dir, started)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.FileHandler(path, mode="a", encoding="utf-8")]
    if echo:
        handlers.append(logging.StreamHandler(sys.stderr))

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = pkg_logger.level
    pkg_logger.setLevel(logging.INFO)
    for h in handlers:
        h.setFormatter(formatter)
        pkg_logger.addHandler(h)

    try:
        yield path
    finally:
        for h in handlers:
            pkg_logger.removeHandler(h)
            h.close()
        pkg_logger.setLevel(previous_level)
