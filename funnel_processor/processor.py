"""Main data processing pipeline."""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .analysis import build_dealer_comparison, create_default_metrics_engine, extract_period
from .cleaning.dealers import build_dealer_registry, dealer_candidate, dealer_keys, extract_dealers, normalize_dealer_name
from .cleaning.fields import RawRecord
from .config.field_mappings import SHEET_POSITIONS, get_schema
from .config.settings import load_api_endpoints
from .diagnostics import log_date_samples, log_dealer_coverage, log_sheet_columns
from .models import AnalysisPeriod, ProcessedResult, RawSheetData
from .readers import ApiMerger, FetchCache, load_bytes, registry as reader_registry, source_name
from .readers.base import FileSource
from .sheets import SheetSet

logger = logging.getLogger(__name__)


def filter_sheets_by_dealers(sheets: SheetSet, keys: set) -> SheetSet:
    """Keep only rows attributed to one of the normalized dealer keys.

    Sheets without a dealer field (store visits) are kept whole.
    """
    tables = []
    for position in SHEET_POSITIONS:
        schema = get_schema(position)
        rows = sheets.by_position(position)
        if not schema.has_field("dealer"):
            tables.append(list(rows))
            continue
        kept = []
        for row in rows:
            name = dealer_candidate(row, schema)
            if name and normalize_dealer_name(name) in keys:
                kept.append(row)
        tables.append(kept)
    return SheetSet.from_tables(tables)


class DataProcessor:
    """Turns a workbook upload or the remote sources into one ProcessedResult."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.reader_registry = reader_registry
        self.metrics_engine = create_default_metrics_engine()

    def read_tables(self, source: FileSource, filename: str = "") -> List[List[RawRecord]]:
        """Read every table of an upload, in sheet order."""
        name = source_name(source, filename)
        data = load_bytes(source, name)
        reader_cls = self.reader_registry.detect_reader(name)
        return reader_cls(self.config).read(data, filename=name)

    def process_file(self, source: FileSource, filename: str = "") -> ProcessedResult:
        """
        Process one workbook whose sheets are the funnel stages, by position.

        Args:
            source: Path, bytes or binary file object of the workbook
            filename: Original file name, used for format detection and messages

        Returns:
            The aggregate result

        Raises:
            FileReadError: the file cannot be read or decoded
            EmptyWorkbookError: the workbook has no sheets
        """
        name = source_name(source, filename)
        logger.info(f"Starting file processing: {name or '<upload>'}")
        tables = self.read_tables(source, name)
        return self.process_sheets(SheetSet.from_tables(tables))

    def read_store_visits(self, source: FileSource, filename: str = "") -> List[RawRecord]:
        """Store-visit rows from the first sheet of an upload."""
        tables = self.read_tables(source, filename)
        return tables[0] if tables else []

    async def process_api(
        self,
        store_visits: Optional[FileSource] = None,
        filename: str = "",
        endpoints: Optional[Dict[str, str]] = None,
        cache: Optional[FetchCache] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> ProcessedResult:
        """
        Process the four remote tables, plus an optional store-visits upload as sheet 5.

        Args:
            store_visits: Optional workbook whose first sheet holds the store visits
            filename: Original file name of the store-visits upload
            endpoints: URL overrides per source; the environment supplies the rest
            cache: Fetch cache for this call; a fresh one is used when omitted
            client: Optional pre-configured HTTP client

        Raises:
            ConfigurationError: an endpoint is not configured
            SourceFetchError: any remote fetch failed
        """
        merger = ApiMerger(load_api_endpoints(endpoints), client=client)
        tables = await merger.fetch_tables(cache if cache is not None else FetchCache())

        visits: List[RawRecord] = []
        if store_visits is not None:
            # pandas/openpyxl decoding runs in the default executor
            loop = asyncio.get_running_loop()
            visits = await loop.run_in_executor(None, self.read_store_visits, store_visits, filename)
            logger.info(f"Store visits upload: {len(visits)} rows")

        return self.process_sheets(SheetSet.from_tables(tables + [visits]))

    def process_sheets(self, sheets: SheetSet) -> ProcessedResult:
        """Compute the full result for an already ingested set of sheets."""
        for position in SHEET_POSITIONS:
            rows = sheets.by_position(position)
            logger.info(f"  - Sheet{position} ({get_schema(position).label}): {len(rows)} rows")
        if not sheets.leads:
            logger.warning("No data found in the Leads sheet - continuing anyway")

        log_sheet_columns(sheets)
        log_date_samples(sheets)
        log_dealer_coverage(sheets)

        period = extract_period(sheets)
        dealers = extract_dealers(sheets.as_list())

        result = self._build_result(sheets, period, dealers)
        logger.info("Processing completed successfully")
        return result

    def filter_by_dealers(self, result: ProcessedResult, dealers: Iterable[str]) -> ProcessedResult:
        """Recompute a result over the rows of the selected dealers only.

        The dealer list and analysis period stay those of the full ingestion.
        """
        keys = dealer_keys(dealers)
        raw = result.raw_data
        full = SheetSet.from_tables(
            [raw.sheet1_data, raw.sheet2_data, raw.sheet3_data, raw.sheet4_data, raw.sheet5_data]
        )
        filtered = filter_sheets_by_dealers(full, keys)
        logger.info(f"Dealer filter ({len(keys)} dealers): {filtered.counts()}")
        return self._build_result(filtered, result.period, list(result.dealers))

    def _build_result(
        self,
        sheets: SheetSet,
        period: AnalysisPeriod,
        dealers: List[str],
    ) -> ProcessedResult:
        metrics = self.metrics_engine.compute(sheets)
        registry = build_dealer_registry(sheets.as_list())
        return ProcessedResult(
            funnel_metrics=metrics["funnel_metrics"],
            leads=metrics["leads"],
            test_drives=metrics["test_drives"],
            billed=metrics["billed"],
            total_store_visits=metrics["total_store_visits"],
            avg_lead_to_test_drive=metrics["avg_lead_to_test_drive"],
            avg_test_drive_to_billing=metrics["avg_test_drive_to_billing"],
            avg_lead_to_billing=metrics["avg_lead_to_billing"],
            avg_total_journey=metrics["avg_total_journey"],
            decided_leads_count=metrics["decided_leads_count"],
            decided_leads_percentage=metrics["decided_leads_percentage"],
            billed_leads_count=metrics["billed_leads_count"],
            period=period,
            dealers=dealers,
            dealer_comparison=build_dealer_comparison(sheets, registry, metrics),
            raw_data=RawSheetData(
                sheet1_data=sheets.leads,
                sheet2_data=sheets.test_drives,
                sheet3_data=sheets.complete_journey,
                sheet4_data=sheets.billed,
                sheet5_data=sheets.store_visits,
            ),
        )
