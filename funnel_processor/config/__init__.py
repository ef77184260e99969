"""Configuration for the funnel processing pipeline."""

from .field_mappings import (
    LEADS,
    TEST_DRIVES,
    COMPLETE_JOURNEY,
    BILLED,
    STORE_VISITS,
    SHEET_POSITIONS,
    SHEET_SCHEMAS,
    SheetSchema,
    get_schema,
)

__all__ = [
    "LEADS",
    "TEST_DRIVES",
    "COMPLETE_JOURNEY",
    "BILLED",
    "STORE_VISITS",
    "SHEET_POSITIONS",
    "SHEET_SCHEMAS",
    "SheetSchema",
    "get_schema",
]
