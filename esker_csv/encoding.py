"""
Source encoding detection.

Plant exports arrive in whatever code page the exporting host used. Detection
is best-effort via charset-normalizer on the head of the file; output is always
written as UTF-8 (see rules.OUTPUT_ENCODING).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from charset_normalizer import from_bytes

from .rules import ENCODING_SAMPLE_BYTES

UTF8_BOM = b"\xef\xbb\xbf"


@dataclass(frozen=True)
class EncodingReport:
    detected: Optional[str]
    decode_used: str


def _is_utf8(name: str) -> bool:
    return name.lower().replace("-", "_") in ("utf_8", "utf8")


def detect_encoding(raw: bytes) -> EncodingReport:
    """
    Pick a codec for the given bytes.

    Rules:
    - Detect best-effort via charset-normalizer; if it has no opinion, use UTF-8.
    - Pure ASCII is read as UTF-8.
    - A UTF-8 BOM maps to utf-8-sig so the BOM never ends up in the header line.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # ASCII head says nothing about the rest of a streamed file; UTF-8 is a superset.
    if decode_used.lower() == "ascii":
        decode_used = "utf-8"
    if raw.startswith(UTF8_BOM) and _is_utf8(decode_used):
        decode_used = "utf-8-sig"

    return EncodingReport(detected=detected, decode_used=decode_used)


def sniff_file_encoding(path: Path) -> EncodingReport:
    with path.open("rb") as f:
        sample = f.read(ENCODING_SAMPLE_BYTES)
    if len(sample) == ENCODING_SAMPLE_BYTES:
        # Cut back to the last full line so no multi-byte character is split.
        sample = sample[: sample.rfind(b"\n") + 1] or sample
    return detect_encoding(sample)


def decode_upload(raw: bytes) -> Tuple[str, EncodingReport]:
    """Decode a whole in-memory upload, falling back rather than failing."""
    report = detect_encoding(raw)
    try:
        return raw.decode(report.decode_used), report
    except (UnicodeDecodeError, LookupError):
        pass

    try:
        return raw.decode("utf-8"), EncodingReport(report.detected, "utf-8")
    except UnicodeDecodeError:
        # Last resort: replacement characters so the date columns still convert
        return raw.decode("utf-8", errors="replace"), EncodingReport(report.detected, "utf-8")
