"""Dealer-name canonicalization and deduplication."""

import logging
import re
import unicodedata as ud
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..config.field_mappings import DEALER_SOURCE_SHEETS, SheetSchema, get_schema
from ..config.settings import DEALER_MIN_LENGTH
from .fields import RawRecord, get_value

logger = logging.getLogger(__name__)

_PARENS = re.compile(r"\([^)]*\)")
_WS = re.compile(r"\s+")
_DIGIT_RUN = re.compile(r"\d{3,}")


def normalize_dealer_name(name: Optional[str]) -> str:
    """Canonical key of a dealer name.

    ``"Concessionária ABC (462011)"`` and ``"CONCESSIONARIA ABC"`` both
    become ``"concessionaria abc"``.
    """
    if not name:
        return ""
    s = name.strip()
    # Dealer codes travel in parentheses, e.g. "(462011)"
    s = _PARENS.sub("", s)
    s = s.lower()
    s = ud.normalize("NFD", s)
    s = "".join(ch for ch in s if not ud.combining(ch))
    s = _WS.sub(" ", s)
    return s.strip()


def is_plausible_dealer_name(candidate: str) -> bool:
    """Reject e-mails, identifiers (3+ digits in a row) and very short strings."""
    text = candidate.strip()
    if len(text) < DEALER_MIN_LENGTH:
        return False
    if "@" in text:
        return False
    return _DIGIT_RUN.search(text) is None


def collation_key(name: str):
    """Locale-style sort key: accents and case only break ties."""
    primary = "".join(ch for ch in ud.normalize("NFD", name) if not ud.combining(ch))
    return (primary.casefold(), name)


def dealer_candidate(row: RawRecord, schema: SheetSchema) -> Optional[str]:
    """Return the trimmed dealer string a row of this sheet contributes, or None."""
    synonyms = schema.synonyms("dealer")
    if not synonyms:
        return None
    raw = get_value(row, synonyms)
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    if schema.dealer_plausibility_check and not is_plausible_dealer_name(text):
        return None
    return text


class DealerRegistry:
    """Append-only mapping of normalized key to first-seen display name."""

    def __init__(self):
        self._names: Dict[str, str] = {}

    def add(self, name: Any) -> Optional[str]:
        """Register a raw name and return its key ('' names are ignored)."""
        if name is None:
            return None
        original = str(name).strip()
        if not original:
            return None
        key = normalize_dealer_name(original)
        if not key:
            return None
        if key not in self._names:
            self._names[key] = original
        return key

    def display_name(self, key: str) -> Optional[str]:
        return self._names.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._names

    def __len__(self) -> int:
        return len(self._names)

    def items(self):
        return self._names.items()

    def sorted_names(self) -> List[str]:
        return sorted(self._names.values(), key=collation_key)


def build_dealer_registry(sheets: Sequence[Sequence[RawRecord]]) -> DealerRegistry:
    """Scan the dealer-bearing sheets in order and register every admitted name.

    Args:
        sheets: The five funnel sheets, by position (index 0 is Leads)

    Returns:
        A registry holding the first-seen display name of every dealer key
    """
    registry = DealerRegistry()
    for position in DEALER_SOURCE_SHEETS:
        schema = get_schema(position)
        rows = sheets[position - 1] if len(sheets) >= position else []
        admitted = 0
        for row in rows:
            candidate = dealer_candidate(row, schema)
            if candidate is not None:
                registry.add(candidate)
                admitted += 1
        logger.debug(f"  - Sheet{position} ({schema.label}): {admitted} rows with dealer")
    return registry


def extract_dealers(sheets: Sequence[Sequence[RawRecord]]) -> List[str]:
    """Distinct dealer display names across the sheets, sorted ascending."""
    registry = build_dealer_registry(sheets)
    dealers = registry.sorted_names()
    logger.info(f"Unique dealers found: {len(dealers)}")
    return dealers


def dealer_keys(names: Iterable[str]) -> set:
    """Normalized keys of a user-supplied dealer selection."""
    return {key for key in (normalize_dealer_name(n) for n in names if n) if key}
