"""Data readers for workbook uploads and remote sources."""

from .base import BaseReader, ReaderRegistry, load_bytes, source_name
from .csv_reader import CSVReader
from .excel_reader import ExcelReader
from .api_reader import API_SOURCES, ApiMerger, FetchCache, extract_table

__all__ = [
    "BaseReader",
    "ReaderRegistry",
    "load_bytes",
    "source_name",
    "CSVReader",
    "ExcelReader",
    "API_SOURCES",
    "ApiMerger",
    "FetchCache",
    "extract_table",
    "registry",
]

registry = ReaderRegistry()
registry.register("csv", CSVReader)
registry.register("xlsx", ExcelReader)
