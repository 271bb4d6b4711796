"""
Per-file conversion: stream a source CSV through the line transformer into a
temporary file, then promote it under the ESKER output name.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from .encoding import sniff_file_encoding
from .errors import PipelineError
from .models import FileOutcome, LineTally, Site
from .rules import OUTPUT_ENCODING, OUTPUT_NAME_TEMPLATE, TEMP_PREFIX, TEMP_SUFFIX
from .sites import detect_site
from .transform import LineTransformer
from .utils import suffixed_name, validate_out_date

logger = logging.getLogger(__name__)


class FileSink(Protocol):
    """Where converted files are staged and published."""

    def open_temp(self) -> Path: ...

    def exists(self, name: str) -> bool: ...

    def promote(self, temp: Path, name: str) -> Path: ...

    def discard(self, temp: Path) -> None: ...


class DirectorySink:
    """Stages temp files inside the output folder so promotion is a same-volume rename."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def open_temp(self) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=self.output_dir)
        os.close(fd)
        return Path(name)

    def exists(self, name: str) -> bool:
        return (self.output_dir / name).exists()

    def promote(self, temp: Path, name: str) -> Path:
        final = self.output_dir / name
        os.replace(temp, final)
        return final

    def discard(self, temp: Path) -> None:
        try:
            temp.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("could not remove temp file %s: %s", temp, exc)


def output_name(site: Site, out_date: str) -> str:
    return OUTPUT_NAME_TEMPLATE.format(site=site.value, out_date=out_date)


class FilePipeline:
    def __init__(
        self,
        transformer: LineTransformer,
        sink: FileSink,
        default_site: Site,
        out_date: str,
        line_terminator: str = "\n",
    ):
        self.transformer = transformer
        self.sink = sink
        self.default_site = default_site
        self.out_date = validate_out_date(out_date)
        self.line_terminator = line_terminator

    def resolve_output_name(self, site: Site) -> str:
        """First free name: base, then base(1), base(2), ... checked against the sink each time."""
        base = output_name(site, self.out_date)
        name = base
        n = 0
        while self.sink.exists(name):
            n += 1
            name = suffixed_name(base, n)
        return name

    def _stream(self, source: Path, encoding: str, temp: Path) -> LineTally:
        tally = LineTally()
        with source.open("r", encoding=encoding, newline="") as src, temp.open(
            "w", encoding=OUTPUT_ENCODING, newline=""
        ) as out:
            for i, raw in enumerate(src):
                result = self.transformer.transform(raw.rstrip("\r\n"), is_header=(i == 0))
                out.write(result.text + self.line_terminator)
                tally = tally.add(result)
        return tally

    def process(self, source: Path) -> FileOutcome:
        """
        Convert one source file.

        Raises PipelineError on any failure; the temp output is discarded and
        nothing is published. The source file itself is never modified here.
        """
        try:
            encoding = sniff_file_encoding(source).decode_used
            site = detect_site(source, self.default_site, encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise PipelineError(source, str(exc)) from exc
        logger.info("%s: detected site %s", source.name, site.value)

        temp = None
        try:
            temp = self.sink.open_temp()
            tally = self._stream(source, encoding, temp)
            final = self.sink.promote(temp, self.resolve_output_name(site))
        except Exception as exc:
            if temp is not None:
                self.sink.discard(temp)
            raise PipelineError(source, str(exc)) from exc

        logger.info(
            "%s: lines=%d changed=%d unchanged=%d",
            source.name, tally.total, tally.changed, tally.unchanged,
        )
        logger.info("%s: output %s", source.name, final)

        return FileOutcome(
            success=True,
            source_path=source,
            output_path=final,
            site=site,
            total_lines=tally.total,
            changed_lines=tally.changed,
            unchanged_lines=tally.unchanged,
        )
