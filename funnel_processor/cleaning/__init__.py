"""Cleaning helpers: field lookup, flags, numbers, dates and dealer names."""

from .fields import RawRecord, get_value, get_number, is_flag_set, parse_flag, to_number
from .dates import parse_date, excel_serial_to_date
from .dealers import (
    DealerRegistry,
    build_dealer_registry,
    dealer_candidate,
    dealer_keys,
    extract_dealers,
    is_plausible_dealer_name,
    normalize_dealer_name,
)

__all__ = [
    "RawRecord",
    "get_value",
    "get_number",
    "is_flag_set",
    "parse_flag",
    "to_number",
    "parse_date",
    "excel_serial_to_date",
    "DealerRegistry",
    "build_dealer_registry",
    "dealer_candidate",
    "dealer_keys",
    "extract_dealers",
    "is_plausible_dealer_name",
    "normalize_dealer_name",
]
