"""Diagnostics package: optional, opt-in via env switches."""

from .metrics import (
    log_sheet_columns,
    log_date_samples,
    log_dealer_coverage,
)

__all__ = [
    "log_sheet_columns",
    "log_date_samples",
    "log_dealer_coverage",
]
