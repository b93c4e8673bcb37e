from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from pulse.catalog import SALES_DEPARTMENT
from pulse.classifier import Classification, Intent
from pulse.records import Record


def merge_daily(canonical: Sequence[Record], entries: Iterable[Record], report_date: Optional[str]) -> List[Record]:
    """Drop every row whose report date equals ``report_date`` exactly, then append the new day."""
    kept = [r for r in canonical if r.report_date != report_date]
    return kept + list(entries)


def merge_master(canonical: Sequence[Record], entries: Iterable[Record]) -> List[Record]:
    """Upsert master rows by (team, metric). Rows absent from the upload are kept."""
    non_sales = [r for r in canonical if r.department != SALES_DEPARTMENT]
    daily_sales = [r for r in canonical if r.department == SALES_DEPARTMENT and not r.is_master]
    merged = [r for r in canonical if r.department == SALES_DEPARTMENT and r.is_master]

    for entry in entries:
        idx = next(
            (i for i, m in enumerate(merged) if m.metric == entry.metric and m.team == entry.team),
            None,
        )
        if idx is None:
            merged.append(entry)
        else:
            merged[idx] = entry

    return non_sales + daily_sales + merged


def merge_records(
    canonical: Sequence[Record],
    entries: Iterable[Record],
    kind: Intent,
    extracted_date: Optional[str] = None,
) -> List[Record]:
    if kind == "daily":
        return merge_daily(canonical, entries, extracted_date)
    if kind == "master":
        return merge_master(canonical, entries)
    raise ValueError(f"unknown merge kind: {kind!r}")


def merge_classification(canonical: Sequence[Record], classification: Classification) -> List[Record]:
    return merge_records(canonical, classification.entries, classification.intent, classification.extracted_date)
