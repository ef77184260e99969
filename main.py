#!/usr/bin/env python3
"""
Command-line entry point for the sales funnel pipeline.

Processes either a funnel workbook (--file) or the remote sources (--api,
optionally with a store-visits workbook) and writes the result as JSON.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from funnel_processor import DataProcessor, ProcessedResult
from funnel_processor.exceptions import ProcessingError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def run(
    file_path: Optional[str] = None,
    use_api: bool = False,
    visits_path: Optional[str] = None,
    dealers: Optional[List[str]] = None,
) -> ProcessedResult:
    """Run one ingestion and return the (optionally dealer-filtered) result."""
    processor = DataProcessor()
    if use_api:
        result = asyncio.run(processor.process_api(store_visits=visits_path))
    else:
        result = processor.process_file(file_path)

    if dealers:
        result = processor.filter_by_dealers(result, dealers)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Sales funnel data processing")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=str, help="Funnel workbook (.xlsx) or CSV path")
    source.add_argument(
        "--api", action="store_true", help="Fetch sheets 1-4 from the configured endpoints"
    )
    parser.add_argument(
        "--visits", type=str, help="Store-visits workbook used as sheet 5 with --api"
    )
    parser.add_argument(
        "--dealer",
        action="append",
        default=[],
        help="Restrict metrics to this dealer (repeatable)",
    )
    parser.add_argument("--output", type=str, help="Output file path for the JSON result")
    parser.add_argument(
        "--verbose", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.visits and not args.api:
        parser.error("--visits is only used together with --api")

    try:
        result = run(args.file, args.api, args.visits, args.dealer)
    except ProcessingError as e:
        logger.error(f"Data processing failed: {e}")
        return 1

    payload = result.model_dump_json(by_alias=True, indent=2)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        logger.info(f"Results saved to {args.output}")
    else:
        sys.stdout.write(payload + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
