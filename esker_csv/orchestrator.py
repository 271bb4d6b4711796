from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import Settings
from .errors import PipelineError
from .models import FileOutcome, RunSummary
from .pipeline import DirectorySink, FilePipeline
from .transform import LineTransformer
from .utils import move_to_dir

logger = logging.getLogger(__name__)


def discover_inputs(input_dir: Path, pattern: str) -> List[Path]:
    """Matching regular files, oldest modification time first."""
    files = [p for p in input_dir.glob(pattern) if p.is_file()]
    return sorted(files, key=lambda p: (p.stat().st_mtime, p.name))


class RunOrchestrator:
    """Runs the pipeline over every input file and archives each source by outcome."""

    def __init__(self, settings: Settings, out_date: str, pipeline: Optional[FilePipeline] = None):
        self.settings = settings
        self.out_date = out_date
        self.pipeline = pipeline or FilePipeline(
            transformer=LineTransformer(settings.cols_with_time, settings.cols_date_only),
            sink=DirectorySink(settings.output_dir),
            default_site=settings.default_site,
            out_date=out_date,
            line_terminator=settings.line_terminator,
        )

    def _route_failure(self, source: Path, summary: RunSummary) -> None:
        try:
            dest = move_to_dir(source, self.settings.failed_dir)
        except Exception as exc:
            logger.error("%s: could not move to failed folder, left in place: %s", source.name, exc)
            summary.unresolved.append(source)
            return
        logger.info("%s: moved to %s", source.name, dest)
        summary.failed.append(source)

    def process_one(self, source: Path, summary: RunSummary) -> FileOutcome:
        outcome = None
        try:
            outcome = self.pipeline.process(source)
            move_to_dir(source, self.settings.processed_dir)
        except Exception as exc:
            reason = exc.reason if isinstance(exc, PipelineError) else exc
            logger.error("%s: FAILED: %s", source.name, reason)
            if outcome is None:
                outcome = FileOutcome(success=False, source_path=source, error=str(exc))
            else:
                # Output was published but the source could not be archived.
                outcome = outcome.model_copy(update={"success": False, "error": str(exc)})
            self._route_failure(source, summary)
        else:
            summary.processed.append(source)
        summary.outcomes.append(outcome)
        return outcome

    def run(self) -> RunSummary:
        summary = RunSummary(run_date=self.out_date, started_at=datetime.now())
        logger.info("Start: run date %s, input %s", self.out_date, self.settings.input_dir)

        try:
            files = discover_inputs(self.settings.input_dir, self.settings.input_glob)
        except OSError as exc:
            logger.error("could not list %s: %s", self.settings.input_dir, exc)
            files = []
        logger.info("Found %d file(s) matching %s", len(files), self.settings.input_glob)

        for source in files:
            self.process_one(source, summary)

        summary.finished_at = datetime.now()
        logger.info(
            "Completed: %d processed, %d failed, %d unresolved",
            len(summary.processed), len(summary.failed), len(summary.unresolved),
        )
        return summary


def run_batch(settings: Settings, out_date: str) -> RunSummary:
    return RunOrchestrator(settings, out_date).run()
