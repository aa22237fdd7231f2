"""CSV helpers for turning an uploaded company list into an enriched CSV."""

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from company_research.constants import ERROR_COLUMN
from company_research.research.models import CompanyRecord

logger = logging.getLogger(__name__)

Row = Dict[str, str]

# Most likely names for the company column, in priority order
COMPANY_COLUMN_CANDIDATES = (
    "Company",
    "Company Name",
    "CompanyName",
    "Account",
    "Account Name",
    "AccountName",
    "Organization",
    "Business",
    "Client",
    "Customer",
)


def identify_company_column(headers: Sequence[str]) -> Optional[str]:
    """
    Pick the column most likely to hold company names.

    Exact candidate matches win, then the first header containing a
    candidate (case-insensitive), then the first header.

    Args:
        headers: CSV header names

    Returns:
        Chosen header, or None when there are no headers
    """
    if not headers:
        return None

    for candidate in COMPANY_COLUMN_CANDIDATES:
        if candidate in headers:
            return candidate

    for candidate in COMPANY_COLUMN_CANDIDATES:
        needle = candidate.lower()
        for header in headers:
            if needle in header.lower():
                return header

    return headers[0]


def extract_companies(rows: Iterable[Mapping[str, str]], column: str) -> List[str]:
    """Return stripped, non-empty, de-duplicated company names in row order."""
    seen = set()
    companies = []
    for row in rows:
        name = (row.get(column) or "").strip()
        if name and name not in seen:
            seen.add(name)
            companies.append(name)
    return companies


def records_to_results(records: Iterable[CompanyRecord]) -> Dict[str, Dict[str, str]]:
    """
    Map company name to the columns it should contribute to its rows.

    Failed companies contribute a single error column.
    """
    results: Dict[str, Dict[str, str]] = {}
    for record in records:
        if record.succeeded:
            results[record.company] = dict(record.results or {})
        else:
            results[record.company] = {ERROR_COLUMN: record.error or ""}
    return results


def merge_research_results(
    rows: Iterable[Mapping[str, str]],
    results_by_company: Mapping[str, Mapping[str, str]],
    column: str,
) -> List[Row]:
    """
    Merge research results into the original rows.

    Rows with an empty company cell are returned unchanged. Result columns
    overwrite existing columns of the same name.
    """
    merged = []
    for row in rows:
        company = (row.get(column) or "").strip()
        if not company:
            merged.append(dict(row))
            continue
        merged.append({**row, **results_by_company.get(company, {})})
    return merged


def read_csv_rows(path: Path) -> List[Row]:
    """Read a CSV with a header row, skipping rows where every cell is blank."""
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        rows = [
            {key: (value or "").strip() for key, value in row.items() if key is not None}
            for row in reader
        ]

    non_empty = [row for row in rows if any(value for value in row.values())]
    if len(non_empty) != len(rows):
        logger.info("Skipped %d empty rows in %s", len(rows) - len(non_empty), path)
    return non_empty


def collect_headers(rows: Iterable[Mapping[str, str]]) -> List[str]:
    """Union of row keys, in first-seen order."""
    headers: List[str] = []
    seen = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def write_csv_rows(path: Path, rows: Sequence[Mapping[str, str]]) -> None:
    """Write rows to CSV; missing cells are left blank."""
    headers = collect_headers(rows)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=headers, restval="")
        writer.writeheader()
        writer.writerows(rows)
