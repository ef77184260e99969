"""Best-effort parsing of dirty date cells."""

import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

from ..config.settings import EXCEL_SERIAL_THRESHOLD, EXCEL_UNIX_EPOCH_SERIAL
from .fields import _is_missing, to_number

_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_UNIX_EPOCH = datetime(1970, 1, 1)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Convert a spreadsheet serial (days since 1899-12-30) to a date.

    Serial 25569 is 1970-01-01; fractional parts (time of day) are dropped.
    """
    try:
        return (_UNIX_EPOCH + timedelta(days=serial - EXCEL_UNIX_EPOCH_SERIAL)).date()
    except (OverflowError, ValueError):
        return None


def _parse_free_form(text: str) -> Optional[date]:
    # Relative keywords such as "now" or "today" are not dates
    if "_" in text or not any(ch.isdigit() for ch in text):
        return None
    with warnings.catch_warnings():
        # pandas warns when it has to guess the format element by element
        warnings.simplefilter("ignore")
        try:
            parsed = pd.to_datetime(text, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(value: Any) -> Optional[date]:
    """Parse a cell into a calendar date, or None. Never raises.

    Tried in order: ISO ``YYYY-M-D``, ``D/M/YYYY``, spreadsheet serial
    numbers above 30000, then a free-form parse. Bare numbers at or below
    the serial threshold are day counts, not dates, and yield None.
    """
    if value is pd.NaT:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _is_missing(value) or isinstance(value, bool):
        return None

    text = str(value).strip()
    if not text:
        return None

    m = _ISO_RE.match(text)
    if m:
        parsed = _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if parsed:
            return parsed

    m = _DMY_RE.match(text)
    if m:
        parsed = _safe_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        if parsed:
            return parsed

    number = to_number(value)
    if number is not None:
        if number > EXCEL_SERIAL_THRESHOLD:
            return excel_serial_to_date(number)
        return None

    return _parse_free_form(text)
