from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from pulse.errors import CalendarLocked

FALLBACK_WORKING_DAYS = 26


def month_key(year: int, month: int) -> str:
    """Key for a 1-based calendar month, e.g. ``2026-1`` for January 2026."""
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    return f"{year}-{month}"


def parse_month_key(key: str) -> Tuple[int, int]:
    try:
        year_s, month_s = str(key).split("-", 1)
        year, month = int(year_s), int(month_s)
    except ValueError as exc:
        raise ValueError(f"invalid month key: {key!r}") from exc
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month key: {key!r}")
    return year, month


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_last_day(year: int, month: int, day: int) -> bool:
    return day == days_in_month(year, month)


def sundays(year: int, month: int) -> Tuple[int, ...]:
    return tuple(
        day
        for day in range(1, days_in_month(year, month) + 1)
        if calendar.weekday(year, month, day) == calendar.SUNDAY
    )


@dataclass(frozen=True)
class HolidayCalendar:
    """Per-month non-working days and finalize locks.

    Months without a stored set fall back to every Sunday. Instances are
    immutable; edits return a new calendar.
    """

    holidays: Mapping[str, Tuple[int, ...]] = field(default_factory=dict)
    locks: Mapping[str, bool] = field(default_factory=dict)

    def effective_holidays(self, key: str) -> Tuple[int, ...]:
        stored = self.holidays.get(key)
        if stored is not None:
            return tuple(stored)
        return sundays(*parse_month_key(key))

    def is_holiday(self, key: str, day: int) -> bool:
        return day in self.effective_holidays(key)

    def is_locked(self, key: str) -> bool:
        return bool(self.locks.get(key, False))

    def is_editable(self, key: str, *, admin: bool = False) -> bool:
        return admin or not self.is_locked(key)

    def working_days(self, key: str) -> int:
        year, month = parse_month_key(key)
        hols = set(self.effective_holidays(key))
        count = sum(1 for day in range(1, days_in_month(year, month) + 1) if day not in hols)
        return count or FALLBACK_WORKING_DAYS

    def toggle(self, key: str, day: int, *, admin: bool = False, strict: bool = False) -> "HolidayCalendar":
        """Flip ``day`` in the month's holiday set.

        A locked month is left unchanged unless ``admin`` is set; with
        ``strict`` that case raises ``CalendarLocked`` instead.
        """
        if not self.is_editable(key, admin=admin):
            if strict:
                raise CalendarLocked(key)
            return self
        year, month = parse_month_key(key)
        if not 1 <= day <= days_in_month(year, month):
            raise ValueError(f"day {day} is outside {key}")
        existing = self.effective_holidays(key)
        updated = tuple(d for d in existing if d != day) if day in existing else existing + (day,)
        holidays = dict(self.holidays)
        holidays[key] = updated
        return HolidayCalendar(holidays=holidays, locks=dict(self.locks))

    def finalize(self, key: str) -> "HolidayCalendar":
        parse_month_key(key)
        locks = dict(self.locks)
        locks[key] = True
        return HolidayCalendar(holidays=dict(self.holidays), locks=locks)

    # ---------------- snapshot wire format ----------------
    def holidays_to_dict(self) -> Dict[str, list]:
        return {k: list(v) for k, v in self.holidays.items()}

    def locks_to_dict(self) -> Dict[str, bool]:
        return {k: bool(v) for k, v in self.locks.items()}

    @classmethod
    def from_dicts(cls, holidays: Any = None, locks: Any = None) -> "HolidayCalendar":
        hols: Dict[str, Tuple[int, ...]] = {}
        for key, days in (holidays or {}).items():
            try:
                hols[str(key)] = tuple(int(d) for d in (days or []))
            except (TypeError, ValueError):
                continue
        lock_map = {str(k): bool(v) for k, v in (locks or {}).items()}
        return cls(holidays=hols, locks=lock_map)
