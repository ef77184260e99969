"""Tolerant access to loosely-typed record fields."""

import math
from typing import Any, Dict, Iterable, Optional

RawRecord = Dict[str, Any]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    # pandas hands empty cells back as NaN
    return isinstance(value, float) and math.isnan(value)


def get_value(row: RawRecord, possible_keys: Iterable[str]) -> Any:
    """Return the value of the first key that is present and non-empty, else None.

    Key order is precedence: when several synonyms coexist in one row the
    earliest one wins.
    """
    if not row:
        return None
    for key in possible_keys:
        value = row.get(key)
        if not _is_missing(value):
            return value
    return None


def parse_flag(value: Any) -> Optional[bool]:
    """Tri-state flag parser.

    ``1``, ``"1"`` and ``True`` are true; ``0``, ``"0"`` and ``False`` are
    false; anything else (including missing) is unknown and returns None.
    """
    if _is_missing(value):
        return None
    if isinstance(value, str):
        if value == "1":
            return True
        if value == "0":
            return False
        return None
    try:
        if value == 1:
            return True
        if value == 0:
            return False
    except (TypeError, ValueError):
        return None
    return None


def is_flag_set(row: RawRecord, possible_keys: Iterable[str]) -> bool:
    """True only when the resolved flag is known to be set."""
    return parse_flag(get_value(row, possible_keys)) is True


def to_number(value: Any) -> Optional[float]:
    """Best-effort numeric coercion. Returns None for missing or non-numeric input."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        # float() also accepts digit separators ("45_000")
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    return number


def get_number(row: RawRecord, possible_keys: Iterable[str]) -> Optional[float]:
    return to_number(get_value(row, possible_keys))
