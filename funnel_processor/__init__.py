"""Sales funnel data processing package."""

from .processor import DataProcessor, filter_sheets_by_dealers
from .sheets import SheetSet
from .models import ProcessedResult, FunnelMetricPair, FunnelMetrics
from .exceptions import (
    ProcessingError,
    ConfigurationError,
    IngestionError,
    EmptyWorkbookError,
    FileReadError,
    SourceFetchError,
)

__all__ = [
    "DataProcessor",
    "filter_sheets_by_dealers",
    "SheetSet",
    "ProcessedResult",
    "FunnelMetricPair",
    "FunnelMetrics",
    "ProcessingError",
    "ConfigurationError",
    "IngestionError",
    "EmptyWorkbookError",
    "FileReadError",
    "SourceFetchError",
]
