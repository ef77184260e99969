"""Per-dealer funnel aggregates compared against the overall baseline."""

import logging
from typing import Any, Dict, List

import polars as pl

from ..cleaning.dealers import DealerRegistry, collation_key, dealer_candidate, normalize_dealer_name
from ..cleaning.fields import is_flag_set
from ..config.field_mappings import BILLED, BILLED_FLAG_FIELDS, LEADS, TEST_DRIVES, get_schema
from ..config.settings import ABSOLUTE_NEUTRAL_BAND, PERCENT_NEUTRAL_BAND
from ..models import DealerComparison, DealerMetrics, percentage
from ..sheets import SheetSet

logger = logging.getLogger(__name__)

BASELINE_NAME = "Total"
COUNT_COLUMNS = ["leads", "test_drives", "sales"]

_STAGE_COLUMN = {LEADS: "leads", TEST_DRIVES: "test_drives", BILLED: "sales"}


def _stage_rows(sheets: SheetSet) -> List[Dict[str, Any]]:
    """One entry per dealer-attributed row, with a 1 in the stage it counts for."""
    # Without a Billed sheet, sales come from the billed flag, as for the totals
    flag_sales = not sheets.billed
    rows = []
    for position, column in _STAGE_COLUMN.items():
        schema = get_schema(position)
        for record in sheets.by_position(position):
            name = dealer_candidate(record, schema)
            key = normalize_dealer_name(name) if name else ""
            if not key:
                continue
            entry = {"dealer_key": key, "leads": 0, "test_drives": 0, "sales": 0}
            entry[column] = 1
            if flag_sales and position != BILLED and is_flag_set(record, BILLED_FLAG_FIELDS):
                entry["sales"] = 1
            rows.append(entry)
    return rows


def _rate(num: str, den: str) -> pl.Expr:
    return (
        pl.when(pl.col(den) > 0)
        .then(pl.col(num) / pl.col(den) * 100)
        .otherwise(0.0)
    )


def aggregate_by_dealer(sheets: SheetSet) -> pl.DataFrame:
    """Count leads, test drives and sales per normalized dealer key."""
    schema = {"dealer_key": pl.Utf8, **{c: pl.Int64 for c in COUNT_COLUMNS}}
    df = pl.DataFrame(_stage_rows(sheets), schema=schema)
    return (
        df.group_by("dealer_key")
        .agg([pl.col(c).sum().alias(c) for c in COUNT_COLUMNS])
        .with_columns(
            _rate("test_drives", "leads").alias("leads_to_test_drive_rate"),
            _rate("sales", "test_drives").alias("test_drive_to_sales_rate"),
        )
    )


def build_dealer_comparison(
    sheets: SheetSet, registry: DealerRegistry, totals: Dict[str, Any]
) -> DealerComparison:
    """
    Build the dealer comparison table.

    Args:
        sheets: The sheets to aggregate
        registry: Dealer keys and display names; every registered dealer gets a row
        totals: Engine results holding ``leads``, ``test_drives`` and ``billed``

    Returns:
        Per-dealer metrics sorted by display name, plus the overall baseline
    """
    by_key = {row["dealer_key"]: row for row in aggregate_by_dealer(sheets).to_dicts()}

    baseline = DealerMetrics(
        dealer_name=BASELINE_NAME,
        leads=totals["leads"],
        test_drives=totals["test_drives"],
        sales=totals["billed"],
        leads_to_test_drive_rate=percentage(totals["test_drives"], totals["leads"]),
        test_drive_to_sales_rate=percentage(totals["billed"], totals["test_drives"]),
    )

    dealer_metrics = []
    for key, display_name in registry.items():
        row = by_key.get(key, {})
        lead_rate = row.get("leads_to_test_drive_rate", 0.0)
        sales_rate = row.get("test_drive_to_sales_rate", 0.0)
        dealer_metrics.append(
            DealerMetrics(
                dealer_name=display_name,
                leads=row.get("leads", 0),
                test_drives=row.get("test_drives", 0),
                sales=row.get("sales", 0),
                leads_to_test_drive_rate=lead_rate,
                test_drive_to_sales_rate=sales_rate,
                leads_to_test_drive_indicator=performance_indicator(
                    lead_rate, baseline.leads_to_test_drive_rate
                ),
                test_drive_to_sales_indicator=performance_indicator(
                    sales_rate, baseline.test_drive_to_sales_rate
                ),
            )
        )
    dealer_metrics.sort(key=lambda m: collation_key(m.dealer_name))

    logger.info(f"Dealer comparison built for {len(dealer_metrics)} dealers")
    return DealerComparison(dealer_metrics=dealer_metrics, baseline=baseline)


def performance_indicator(dealer_value: float, baseline_value: float, is_percentage: bool = True) -> str:
    """'above', 'below' or 'neutral' relative to the baseline.

    Differences inside the neutral band (0.5 points for rates, 1 for counts)
    are 'neutral'.
    """
    band = PERCENT_NEUTRAL_BAND if is_percentage else ABSOLUTE_NEUTRAL_BAND
    difference = dealer_value - baseline_value
    if abs(difference) < band:
        return "neutral"
    return "above" if difference > 0 else "below"
