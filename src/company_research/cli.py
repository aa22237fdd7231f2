#!/usr/bin/env python3
"""Command-line entry point: enrich a CSV of companies with researched fields."""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from company_research.csv_enrichment import (
    extract_companies,
    identify_company_column,
    merge_research_results,
    read_csv_rows,
    records_to_results,
    write_csv_rows,
)
from company_research.exceptions import ConfigurationError, ValidationError
from company_research.logging_config import format_company_name, setup_logging
from company_research.research.models import CompanyRecord
from company_research.research.service import research_batch
from company_research.settings import get_research_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Research companies listed in a CSV and write an enriched copy"
    )
    parser.add_argument("input", type=Path, help="CSV file with a header row")
    parser.add_argument(
        "--fields",
        nargs="+",
        required=True,
        help='Fields to research, e.g. --fields "Website" "ERP System"',
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output CSV path (default: enriched_<input name> next to the input)",
    )
    parser.add_argument(
        "--company-column",
        help="Column holding company names (default: auto-detect)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Companies researched at once (default: config value, usually 3)",
    )
    parser.add_argument(
        "--config",
        help="Path to research settings YAML (default: config/research.yaml)",
    )
    parser.add_argument(
        "--api-key",
        help="Provider API key (default: OPENROUTER_API_KEY environment variable)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--no-env",
        action="store_true",
        help="Skip loading .env file",
    )
    return parser


def _print_progress(total: int):
    done = 0

    def on_record(record: CompanyRecord) -> None:
        nonlocal done
        done += 1
        _, display_name = format_company_name(record.company, max_length=40)
        status = "ok" if record.succeeded else f"error: {record.error}"
        print(f"  [{done}/{total}] {display_name}: {status}")

    return on_record


def main(argv: Optional[List[str]] = None) -> int:
    """Run research over a CSV file."""
    args = build_parser().parse_args(argv)

    if not args.no_env:
        load_dotenv()

    # Provide a safe default ENVIRONMENT for logging if not supplied
    os.environ.setdefault("ENVIRONMENT", "development")
    setup_logging(log_level=args.log_level)

    try:
        settings = get_research_settings(args.config)
    except ConfigurationError as e:
        print(f"\n❌ Configuration error: {e}")
        return 1

    if not args.input.exists():
        print(f"\n❌ Input file not found: {args.input}")
        return 1

    rows = read_csv_rows(args.input)
    if not rows:
        print(f"\n❌ CSV data is empty: {args.input}")
        return 1

    headers = list(rows[0].keys())
    column = args.company_column or identify_company_column(headers)
    if column not in headers:
        print(f"\n❌ Company column '{column}' not found. Columns: {', '.join(headers)}")
        return 1

    companies = extract_companies(rows, column)
    credential = args.api_key or os.getenv("OPENROUTER_API_KEY", "")
    output = args.output or args.input.with_name(f"enriched_{args.input.name}")

    print(f"📋 Researching {len(companies)} companies from column '{column}'")
    print(f"  - Fields: {', '.join(args.fields)}")
    print(f"  - Model: {settings.model}")

    try:
        records = asyncio.run(
            research_batch(
                companies,
                args.fields,
                credential,
                concurrency_limit=args.concurrency,
                settings=settings,
                on_record=_print_progress(len(companies)),
            )
        )
    except ValidationError as e:
        print(f"\n❌ {e}")
        return 1

    merged = merge_research_results(rows, records_to_results(records), column)
    write_csv_rows(output, merged)

    failed = sum(1 for record in records if not record.succeeded)
    print("=" * 70)
    print(f"Companies researched: {len(records) - failed}")
    print(f"Companies failed: {failed}")
    print(f"Enriched CSV written to: {output}")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
