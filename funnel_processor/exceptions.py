"""Exceptions raised by the funnel processing pipeline."""


class ProcessingError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(ProcessingError):
    """Required configuration (e.g. endpoint URLs) is missing."""


class IngestionError(ProcessingError):
    """A source could not be turned into funnel sheets. Aborts the whole call."""


class EmptyWorkbookError(IngestionError):
    """The workbook contains no sheets at all."""


class FileReadError(IngestionError):
    """The uploaded file could not be read or decoded."""

    def __init__(self, message: str, filename: str = ""):
        super().__init__(message)
        self.filename = filename


class SourceFetchError(IngestionError):
    """A remote table fetch failed."""

    def __init__(self, source: str, url: str, reason: str):
        super().__init__(f"Failed to fetch '{source}' from {url}: {reason}")
        self.source = source
        self.url = url
        self.reason = reason
