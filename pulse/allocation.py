from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from pulse.holidays import HolidayCalendar, days_in_month, is_last_day, month_key

# The closing day carries this many normal days' worth of target.
LAST_DAY_WEIGHT = 3.5


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def total_weight_units(working_days: int) -> float:
    return (working_days - 1) + LAST_DAY_WEIGHT


def daily_target(total_plan: float, day: int, month: int, year: int, working_days: int) -> int:
    """Weighted share of ``total_plan`` for one day of a 1-based month.

    Holidays are not considered here; callers zero them out where needed.
    """
    units = total_weight_units(working_days)
    if is_last_day(year, month, day):
        return round_half_up(total_plan / units * LAST_DAY_WEIGHT)
    return round_half_up(total_plan / units)


def month_targets(total_plan: float, calendar: HolidayCalendar, year: int, month: int) -> List[int]:
    """Per-day targets for the month with holidays zeroed, index 0 is day 1."""
    key = month_key(year, month)
    wd = calendar.working_days(key)
    hols = set(calendar.effective_holidays(key))
    return [
        0 if day in hols else daily_target(total_plan, day, month, year, wd)
        for day in range(1, days_in_month(year, month) + 1)
    ]
