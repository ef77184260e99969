"""Diagnostics helpers (opt-in via PROCESSOR_DIAG).

Keep diagnostics separate from core logic. Never mutate inputs.
Failures are logged as errors and do not raise.
"""

from __future__ import annotations

import logging

from ..cleaning.dealers import dealer_candidate
from ..cleaning.fields import get_value
from ..config.field_mappings import LEADS, SHEET_POSITIONS, get_schema
from ..config.settings import diagnostics_enabled
from ..sheets import SheetSet

logger = logging.getLogger(__name__)

SAMPLE_ROWS = 3


def log_sheet_columns(sheets: SheetSet) -> None:
    """Log the header set of each sheet (union over rows, first-seen order)."""
    if not diagnostics_enabled():
        return
    try:
        for position in SHEET_POSITIONS:
            columns: dict = {}
            for row in sheets.by_position(position):
                for key in row:
                    columns.setdefault(key, None)
            logger.info(f"[diag] Sheet{position} ({get_schema(position).label}) columns: {list(columns)}")
    except Exception as e:
        logger.error(f"[diag] log_sheet_columns failed: {e}")


def log_date_samples(sheets: SheetSet) -> None:
    """Log the raw date cells of the first Leads rows with their Python types."""
    if not diagnostics_enabled():
        return
    try:
        synonyms = get_schema(LEADS).synonyms("date")
        for index, row in enumerate(sheets.leads[:SAMPLE_ROWS]):
            value = get_value(row, synonyms)
            logger.info(f"[diag] Row {index}: date = {value!r} ({type(value).__name__})")
    except Exception as e:
        logger.error(f"[diag] log_date_samples failed: {e}")


def log_dealer_coverage(sheets: SheetSet) -> None:
    """Log how many rows of each dealer-bearing sheet were rejected or lack a dealer."""
    if not diagnostics_enabled():
        return
    try:
        for position in SHEET_POSITIONS:
            schema = get_schema(position)
            if not schema.has_field("dealer"):
                continue
            rows = sheets.by_position(position)
            missing = sum(1 for row in rows if dealer_candidate(row, schema) is None)
            logger.info(
                f"[diag] Sheet{position} ({schema.label}): {len(rows) - missing}/{len(rows)} rows attributed to a dealer"
            )
    except Exception as e:
        logger.error(f"[diag] log_dealer_coverage failed: {e}")
