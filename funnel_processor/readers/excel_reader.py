"""Excel workbook reader: every sheet, by position, via pandas/openpyxl."""

import io
import logging
import math
from typing import Any, List

import numpy as np
import pandas as pd

from ..cleaning.fields import RawRecord
from ..exceptions import EmptyWorkbookError, FileReadError
from .base import BaseReader

logger = logging.getLogger(__name__)


def _to_native(value: Any) -> Any:
    """Turn pandas/numpy cell values into plain Python values (blank -> None)."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def frame_to_records(df: pd.DataFrame) -> List[RawRecord]:
    """Records of a sheet, keyed by header in column order, blank rows dropped."""
    df = df.dropna(how="all")
    columns = [str(c) for c in df.columns]
    return [
        {col: _to_native(v) for col, v in zip(columns, values)}
        for values in df.itertuples(index=False, name=None)
    ]


class ExcelReader(BaseReader):
    """Reader for Excel workbooks (openpyxl only)."""

    def read(self, data: bytes, filename: str = "", max_sheets: int = 5) -> List[List[RawRecord]]:
        """Read up to ``max_sheets`` sheets in workbook order.

        Raises:
            FileReadError: the bytes are not a readable workbook
            EmptyWorkbookError: the workbook has no sheets
        """
        try:
            sheets = pd.read_excel(
                io.BytesIO(data),
                sheet_name=None,
                engine="openpyxl",
                dtype=object,
            )
        except Exception as e:
            raise FileReadError(f"Could not decode workbook {filename or ''}: {e}".strip(), filename=filename) from e

        names = list(sheets.keys())
        logger.info(f"Sheets found in workbook: {names}")
        if not names:
            raise EmptyWorkbookError(f"No sheet found in workbook {filename}".strip())

        return [frame_to_records(sheets[name]) for name in names[:max_sheets]]
