from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from pulse.holidays import days_in_month


@dataclass(frozen=True)
class AuditThresholds:
    severe: float = 50.0
    moderate: float = 10.0


@dataclass(frozen=True)
class AuditFilters:
    year: int
    month: int
    focused_day: Optional[int] = None
    thresholds: AuditThresholds = field(default_factory=AuditThresholds)


def _as_int(value: object, default: Optional[int]) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def normalize_filters(raw: dict, *, today: Optional[date] = None) -> AuditFilters:
    today = today or date.today()

    year = _as_int(raw.get("year"), today.year) or today.year
    month = _as_int(raw.get("month"), today.month) or today.month
    month = max(1, min(12, month))

    focused_day = _as_int(raw.get("focused_day"), None)
    if focused_day is not None:
        focused_day = max(1, min(days_in_month(year, month), focused_day))

    t = raw.get("thresholds") or {}
    thresholds = AuditThresholds(
        severe=float(t.get("severe", 50.0)),
        moderate=float(t.get("moderate", 10.0)),
    )
    return AuditFilters(year=year, month=month, focused_day=focused_day, thresholds=thresholds)
