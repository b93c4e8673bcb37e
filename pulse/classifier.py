from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence

from pulse.catalog import SALES_DEPARTMENT, SALES_TEAMS, match_product
from pulse.errors import NoRecognizedProducts, UploadRejected
from pulse.records import Record

logger = logging.getLogger(__name__)

Intent = Literal["master", "daily"]

SCAN_ROWS = 30
SCAN_COLS = 20
DEFAULT_DATA_COLUMN = 1

MONTH_TOKENS = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]
YEAR_PATTERN = re.compile(r"20[23]\d")
MASTER_TOKENS = ["master plan", "annual target", "budget 20"]
DAILY_HEADERS = {"actual", "achievement", "achievment"}
MASTER_HEADERS = {"target", "tgt", "plan"}
PIVOT_LABELS = {"Row Labels", "Grand Total"}
LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

WRONG_FILE_DAILY = (
    "VALIDATION FAILED: This appears to be a Daily Achievement file. Please upload the Master Plan."
)
WRONG_FILE_MASTER = "VALIDATION FAILED: This appears to be a Master Plan file. Please upload a Daily Report."
MISSING_DATE = "ERROR: Missing valid date header (e.g. 'Monday, Jan 01, 2025') in the Sales sheet."
NO_PRODUCTS = (
    "IMPORT FAILED: No recognized products found in Column 1. "
    "Ensure product names match the Swiss catalog."
)


@dataclass(frozen=True)
class HeaderSignals:
    extracted_date: Optional[str] = None
    master_likely: bool = False
    daily_likely: bool = False
    daily_column: Optional[int] = None
    master_column: Optional[int] = None


@dataclass(frozen=True)
class Classification:
    intent: Intent
    data_column: int
    extracted_date: Optional[str]
    master_likely: bool
    daily_likely: bool
    entries: List[Record] = field(default_factory=list)
    skipped_rows: int = 0
    unmatched_rows: int = 0
    non_numeric_rows: int = 0

    @property
    def report_date(self) -> Optional[str]:
        return self.extracted_date if self.intent == "daily" else None


def _cell(grid: Sequence[Sequence[str]], r: int, c: int) -> str:
    row = grid[r]
    if c >= len(row):
        return ""
    value = row[c]
    return "" if value is None else str(value).strip()


def _mentions_month(text: str) -> bool:
    return any(m in text for m in MONTH_TOKENS)


def scan_header_signals(grid: Sequence[Sequence[str]]) -> HeaderSignals:
    """Scan the top-left window for date, master-plan and column-header signals."""
    extracted_date: Optional[str] = None
    master_likely = False
    daily_likely = False
    daily_column: Optional[int] = None
    master_column: Optional[int] = None

    for r in range(min(len(grid), SCAN_ROWS)):
        for c in range(SCAN_COLS):
            text = _cell(grid, r, c)
            if not text:
                continue
            low = text.lower()

            if extracted_date is None and _mentions_month(low) and YEAR_PATTERN.search(low):
                extracted_date = text
                daily_likely = True

            if any(token in low for token in MASTER_TOKENS):
                master_likely = True

            if low in DAILY_HEADERS:
                daily_column = c
                daily_likely = True

            if low in MASTER_HEADERS:
                master_column = c
                if not daily_likely:
                    master_likely = True

    return HeaderSignals(
        extracted_date=extracted_date,
        master_likely=master_likely,
        daily_likely=daily_likely,
        daily_column=daily_column,
        master_column=master_column,
    )


def parse_number(text: object) -> Optional[float]:
    """Leading-number parse after dropping thousands separators; blank reads as 0."""
    s = str(text if text not in (None, "") else "0").replace(",", "")
    match = LEADING_NUMBER.match(s)
    if not match:
        return None
    return float(match.group(0))


def is_scaffolding_label(text: str) -> bool:
    """Pivot-table labels that sit in the product column but are not products."""
    if not text or text in PIVOT_LABELS or text in SALES_TEAMS:
        return True
    low = text.lower()
    return low in DAILY_HEADERS or low in MASTER_HEADERS or _mentions_month(low)


def classify_sheet(grid: Sequence[Sequence[str]], intent: Intent) -> Classification:
    """Classify a Sales-sheet grid and extract catalog entries.

    Raises ``UploadRejected`` for structural problems and
    ``NoRecognizedProducts`` when no row maps to the catalog.
    """
    if intent not in ("master", "daily"):
        raise ValueError(f"unknown upload intent: {intent!r}")

    signals = scan_header_signals(grid)

    if intent == "master" and signals.daily_likely and not signals.master_likely:
        raise UploadRejected(WRONG_FILE_DAILY, reason="wrong_file_type")
    if intent == "daily" and signals.master_likely and not signals.daily_likely:
        raise UploadRejected(WRONG_FILE_MASTER, reason="wrong_file_type")

    column = signals.daily_column if intent == "daily" else signals.master_column
    if column is None:
        column = DEFAULT_DATA_COLUMN

    if intent == "daily" and not signals.extracted_date:
        raise UploadRejected(MISSING_DATE, reason="missing_date")

    entries: List[Record] = []
    skipped = unmatched = non_numeric = 0
    for r in range(len(grid)):
        product_text = _cell(grid, r, 0)
        if is_scaffolding_label(product_text):
            skipped += 1
            continue
        match = match_product(product_text)
        if match is None:
            unmatched += 1
            continue
        value = parse_number(_cell(grid, r, column))
        if value is None:
            non_numeric += 1
            continue
        team, product = match
        if intent == "master":
            entries.append(Record(department=SALES_DEPARTMENT, team=team, metric=product, plan=value, actual=0.0))
        else:
            entries.append(
                Record(
                    department=SALES_DEPARTMENT,
                    team=team,
                    metric=product,
                    plan=0.0,
                    actual=value,
                    report_date=signals.extracted_date,
                )
            )

    logger.debug(
        "classified %s upload: column=%s entries=%d skipped=%d unmatched=%d non_numeric=%d",
        intent,
        column,
        len(entries),
        skipped,
        unmatched,
        non_numeric,
    )
    if not entries:
        raise NoRecognizedProducts(NO_PRODUCTS)

    return Classification(
        intent=intent,
        data_column=column,
        extracted_date=signals.extracted_date,
        master_likely=signals.master_likely,
        daily_likely=signals.daily_likely,
        entries=entries,
        skipped_rows=skipped,
        unmatched_rows=unmatched,
        non_numeric_rows=non_numeric,
    )
