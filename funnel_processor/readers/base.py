"""Base reader interface and registry."""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Type, Union

from ..cleaning.fields import RawRecord
from ..exceptions import FileReadError

logger = logging.getLogger(__name__)

FileSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO]


def load_bytes(source: FileSource, filename: str = "") -> bytes:
    """Fully materialize a path, byte string or binary file object in memory."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, os.PathLike)):
            return Path(source).read_bytes()
        data = source.read()
    except OSError as e:
        raise FileReadError(f"Error reading file {filename or source}: {e}", filename=filename) from e
    if isinstance(data, str):
        raise FileReadError(f"File {filename or 'upload'} was opened in text mode", filename=filename)
    return data


def source_name(source: FileSource, filename: str = "") -> str:
    if filename:
        return filename
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    return getattr(source, "name", "") or ""


class BaseReader(ABC):
    """Base interface for all workbook readers.

    A reader turns the raw bytes of one upload into its tables, in sheet
    order, each table being a list of records keyed by header.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    @abstractmethod
    def read(self, data: bytes, filename: str = "") -> List[List[RawRecord]]:
        """Decode the bytes into tables, in sheet order."""
        pass


class ReaderRegistry:
    """Registry for file readers."""

    EXTENSION_MAP = {
        ".xlsx": "xlsx",
        ".xlsm": "xlsx",
        ".csv": "csv",
        ".txt": "csv",
    }

    def __init__(self, default: str = "xlsx"):
        self._readers: Dict[str, Type[BaseReader]] = {}
        self.default = default

    def register(self, file_type: str, reader_class: Type[BaseReader]):
        """Register a reader for specific file type."""
        self._readers[file_type] = reader_class

    def detect_reader(self, filename: str) -> Type[BaseReader]:
        """Pick a reader from the file extension, falling back to the default.

        Handles polluted names such as ``report.xlsx~1`` or ``report.csv (2)``.
        """
        basename = os.path.basename(filename or "").lower()
        for ext, reader_key in self.EXTENSION_MAP.items():
            ext_pos = basename.rfind(ext)
            if ext_pos == -1:
                continue
            next_char_pos = ext_pos + len(ext)
            if next_char_pos >= len(basename) or basename[next_char_pos] in " .~":
                return self._readers[reader_key]
        if basename:
            logger.warning(f"Unrecognised extension for {basename}, reading as {self.default}")
        return self._readers[self.default]
