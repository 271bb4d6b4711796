from pathlib import Path


class EskerCsvError(Exception):
    """Base error for the project."""


class PipelineError(EskerCsvError):
    """Processing of a single source file failed."""

    def __init__(self, source: Path, message: str):
        super().__init__(f"{source.name}: {message}")
        self.source = source
        self.reason = message


class RoutingError(EskerCsvError):
    """A source file could not be moved to its archive folder."""
