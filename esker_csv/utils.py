from datetime import datetime
from pathlib import Path
import shutil

from .errors import RoutingError
from .rules import OUT_DATE_FORMAT


def suffixed_name(name: str, n: int) -> str:
    """'a.csv', 2 -> 'a(2).csv'"""
    p = Path(name)
    return f"{p.stem}({n}){p.suffix}"


def unique_path(dest: Path) -> Path:
    """
    If dest exists, append '(1)', '(2)', ... before the suffix.
    Returns a Path that does not exist at the time of the call.
    """
    if not dest.exists():
        return dest

    i = 1
    while True:
        candidate = dest.parent / suffixed_name(dest.name, i)
        if not candidate.exists():
            return candidate
        i += 1


def move_to_dir(src: Path, dest_dir: Path) -> Path:
    """Move src into dest_dir without overwriting anything already there."""
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        dest = unique_path(dest_dir / src.name)
        shutil.move(str(src), str(dest))
    except OSError as exc:
        raise RoutingError(f"could not move {src} to {dest_dir}: {exc}") from exc
    return dest


def validate_out_date(value: str) -> str:
    """Return value unchanged if it is a YYYY-MM-DD date, else raise ValueError."""
    datetime.strptime(value, OUT_DATE_FORMAT)
    return value
