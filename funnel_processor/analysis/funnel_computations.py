"""Funnel metric computations."""

import logging
import math
from typing import Any, Dict, List, Optional

import polars as pl

from ..cleaning.fields import RawRecord, get_number, is_flag_set, to_number
from ..config.field_mappings import (
    BILLED_FLAG_FIELDS,
    COMPLETE_JOURNEY,
    DURATION_METRICS,
    LEAD_TO_BILLING_DAYS_FIELDS,
    LEADS,
    SHEET_POSITIONS,
    STORE_VISITS_COLUMN_INDEX,
    TEST_DRIVE_FLAG_FIELDS,
    get_schema,
)
from ..config.settings import DECIDED_LEAD_MAX_DAYS
from ..models import FunnelMetricPair, FunnelMetrics, percentage
from ..sheets import SheetSet
from .computations import BaseComputation

logger = logging.getLogger(__name__)


def _count_flag(rows: List[RawRecord], flag_fields) -> int:
    return sum(1 for row in rows if is_flag_set(row, flag_fields))


def store_visit_count(row: RawRecord) -> Optional[float]:
    """Visits recorded in a store-visits row.

    This sheet has an externally fixed layout with unreliable headers, so
    the count is read from the third column by position rather than by name.
    """
    values = list(row.values())
    if len(values) <= STORE_VISITS_COLUMN_INDEX:
        return None
    return to_number(values[STORE_VISITS_COLUMN_INDEX])


def mean_or_none(values: List[float]) -> Optional[float]:
    """Mean of the values, None (never 0 or NaN) when there are none."""
    if not values:
        return None
    return pl.Series("values", values, dtype=pl.Float64).mean()


class TotalsComputation(BaseComputation):
    """Row counts, flag-derived counts and the store visit total."""

    def __init__(self):
        super().__init__("totals")

    def compute(self, sheets: SheetSet, results: Dict[str, Any]) -> Dict[str, Any]:
        leads_with_test_drive = _count_flag(sheets.leads, TEST_DRIVE_FLAG_FIELDS)
        leads_billed = _count_flag(sheets.leads, BILLED_FLAG_FIELDS)
        test_drives_billed = _count_flag(sheets.test_drives, BILLED_FLAG_FIELDS)
        leads_direct = sum(
            1
            for row in sheets.leads
            if is_flag_set(row, BILLED_FLAG_FIELDS) and not is_flag_set(row, TEST_DRIVE_FLAG_FIELDS)
        )

        billed_rows = len(sheets.billed)
        # The Billed sheet wins whenever it has rows
        billed = billed_rows if billed_rows > 0 else leads_billed + test_drives_billed

        total_store_visits = 0.0
        for row in sheets.store_visits:
            visits = store_visit_count(row)
            if visits is not None:
                total_store_visits += visits

        logger.info(
            f"Totals: leads={len(sheets.leads)}, test_drives={len(sheets.test_drives)}, "
            f"complete_journey={len(sheets.complete_journey)}, billed_rows={billed_rows}, "
            f"store_visits={total_store_visits}"
        )
        logger.info(
            f"Flags: leads_with_test_drive={leads_with_test_drive}, leads_billed={leads_billed}, "
            f"test_drives_billed={test_drives_billed}, leads_direct={leads_direct}, billed={billed}"
        )

        return {
            "leads": len(sheets.leads),
            "test_drives": len(sheets.test_drives),
            "complete_journey_rows": len(sheets.complete_journey),
            "billed_rows": billed_rows,
            "billed": billed,
            "leads_with_test_drive": leads_with_test_drive,
            "leads_billed": leads_billed,
            "test_drives_billed": test_drives_billed,
            "leads_direct": leads_direct,
            "total_store_visits": total_store_visits,
        }


class FunnelComputation(BaseComputation):
    """The six conversion segments."""

    def __init__(self):
        super().__init__("funnel")

    def compute(self, sheets: SheetSet, results: Dict[str, Any]) -> Dict[str, Any]:
        leads = results["leads"]
        test_drives = results["test_drives"]
        # Half-up, so 2.5 visits count as 3
        visits = int(math.floor(results["total_store_visits"] + 0.5))

        def pair(start: int, end: int) -> FunnelMetricPair:
            return FunnelMetricPair(from_=start, to=end)

        funnel = FunnelMetrics(
            leads_direct=pair(leads, results["leads_direct"]),
            leads_with_test_drive=pair(leads, results["leads_with_test_drive"]),
            test_drive_to_sale=pair(test_drives, results["test_drives_billed"]),
            complete_journey=pair(leads, results["complete_journey_rows"]),
            visits_to_test_drive=pair(visits, test_drives),
            visits_to_billing=pair(visits, results["billed"]),
        )
        return {"funnel_metrics": funnel}


class DurationAveragesComputation(BaseComputation):
    """Average day counts between funnel stages."""

    def __init__(self):
        super().__init__("duration_averages")

    def compute(self, sheets: SheetSet, results: Dict[str, Any]) -> Dict[str, Any]:
        averages: Dict[str, Any] = {}
        for metric, logical_field in DURATION_METRICS.items():
            values: List[float] = []
            for position in SHEET_POSITIONS:
                synonyms = get_schema(position).synonyms(logical_field)
                if not synonyms:
                    continue
                for row in sheets.by_position(position):
                    days = get_number(row, synonyms)
                    if days is not None:
                        values.append(days)
            averages[metric] = mean_or_none(values)
            logger.info(f"{metric}: {averages[metric]} over {len(values)} values")
        return averages


class DecidedLeadsComputation(BaseComputation):
    """Billed leads that decided within the decision window."""

    def __init__(self, max_days: int = DECIDED_LEAD_MAX_DAYS):
        super().__init__("decided_leads")
        self.max_days = max_days

    def compute(self, sheets: SheetSet, results: Dict[str, Any]) -> Dict[str, Any]:
        decided = 0
        for position in (LEADS, COMPLETE_JOURNEY):
            for row in sheets.by_position(position):
                days = get_number(row, LEAD_TO_BILLING_DAYS_FIELDS)
                if days is not None and days <= self.max_days:
                    decided += 1

        billed_leads = results["leads_billed"] + results["complete_journey_rows"]
        return {
            "decided_leads_count": decided,
            "decided_leads_percentage": percentage(decided, billed_leads),
            "billed_leads_count": billed_leads,
        }
