from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime
from typing import List, Optional

from pydantic import ValidationError

from .config import get_settings
from .logs import run_logging
from .orchestrator import run_batch
from .rules import OUT_DATE_FORMAT
from .utils import validate_out_date

logger = logging.getLogger(__name__)


def _run_date(value: str) -> str:
    try:
        return validate_out_date(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="esker-csv",
        description="Convert plant CSV exports to ESKER date format and archive the sources.",
    )
    p.add_argument(
        "run_date",
        nargs="?",
        type=_run_date,
        default=date.today().strftime(OUT_DATE_FORMAT),
        help="Date stamped into output names, YYYY-MM-DD (default: today)",
    )
    p.add_argument("--input-dir", help="Folder scanned for source files")
    p.add_argument("--output-dir", help="Folder receiving converted files")
    p.add_argument("--processed-dir", help="Archive for successfully converted sources")
    p.add_argument("--failed-dir", help="Archive for sources that failed")
    p.add_argument("--log-dir", help="Folder for per-run log files")
    p.add_argument("--glob", dest="input_glob", help="Input filename pattern (default: *.csv)")
    p.add_argument("--quiet", action="store_true", help="Do not echo log lines to stderr")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            processed_dir=args.processed_dir,
            failed_dir=args.failed_dir,
            log_dir=args.log_dir,
            input_glob=args.input_glob,
        )
    except ValidationError as exc:
        print(f"[ERR] invalid configuration:\n{exc}", file=sys.stderr)
        return 2

    settings.ensure_directories()

    with run_logging(settings.log_dir, datetime.now(), echo=not args.quiet):
        summary = run_batch(settings, args.run_date)

    return 0 if summary.ok else 1


if __name__ == "__main__":
    sys.exit(main())
