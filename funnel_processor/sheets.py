"""The five positional funnel sheets produced by every ingestion path."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .cleaning.fields import RawRecord
from .config.field_mappings import SHEET_POSITIONS, get_schema


@dataclass(frozen=True)
class SheetSet:
    leads: List[RawRecord] = field(default_factory=list)
    test_drives: List[RawRecord] = field(default_factory=list)
    complete_journey: List[RawRecord] = field(default_factory=list)
    billed: List[RawRecord] = field(default_factory=list)
    store_visits: List[RawRecord] = field(default_factory=list)

    @classmethod
    def from_tables(cls, tables: Sequence[Optional[Iterable[RawRecord]]]) -> "SheetSet":
        """Build from up to five tables in position order; missing ones are empty."""
        if len(tables) > len(SHEET_POSITIONS):
            tables = tables[: len(SHEET_POSITIONS)]
        padded = [list(t) if t is not None else [] for t in tables]
        padded += [[] for _ in range(len(SHEET_POSITIONS) - len(padded))]
        return cls(*padded)

    def by_position(self, position: int) -> List[RawRecord]:
        return getattr(self, get_schema(position).key)

    def as_list(self) -> List[List[RawRecord]]:
        return [self.by_position(p) for p in SHEET_POSITIONS]

    def counts(self) -> Dict[str, int]:
        return {get_schema(p).key: len(self.by_position(p)) for p in SHEET_POSITIONS}
