"""Analysis period derived from the Leads sheet dates."""

import logging

from ..cleaning.dates import parse_date
from ..cleaning.fields import get_value
from ..config.field_mappings import LEADS, get_schema
from ..models import AnalysisPeriod
from ..sheets import SheetSet

logger = logging.getLogger(__name__)


def extract_period(sheets: SheetSet) -> AnalysisPeriod:
    """Earliest and latest parseable date of the Leads sheet; both None when there are none."""
    synonyms = get_schema(LEADS).synonyms("date")
    dates = []
    for row in sheets.leads:
        parsed = parse_date(get_value(row, synonyms))
        if parsed is not None:
            dates.append(parsed)

    logger.info(f"Valid dates found: {len(dates)}")
    if not dates:
        logger.warning("No valid date found in the Leads sheet")
        return AnalysisPeriod()
    return AnalysisPeriod(start=min(dates), end=max(dates))
