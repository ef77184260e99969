"""CSV reader: a CSV upload is a one-sheet workbook (the Leads sheet)."""

import io
from typing import List

import polars as pl

from ..cleaning.fields import RawRecord
from ..exceptions import EmptyWorkbookError, FileReadError
from .base import BaseReader


class CSVReader(BaseReader):
    """Reader for CSV files."""

    def read(self, data: bytes, filename: str = "", **kwargs) -> List[List[RawRecord]]:
        """Read CSV bytes using polars."""
        read_config = {
            "ignore_errors": True,
            "truncate_ragged_lines": True,
            "try_parse_dates": True,
            **kwargs,
        }
        try:
            df = pl.read_csv(io.BytesIO(data), **read_config)
        except pl.exceptions.NoDataError as e:
            raise EmptyWorkbookError(f"CSV file {filename} is empty".strip()) from e
        except (pl.exceptions.ComputeError, UnicodeDecodeError) as e:
            raise FileReadError(f"Could not decode CSV {filename}: {e}", filename=filename) from e
        return [df.to_dicts()]
