import pytest

from pulse.errors import CalendarLocked
from pulse.holidays import (
    FALLBACK_WORKING_DAYS,
    HolidayCalendar,
    days_in_month,
    is_last_day,
    month_key,
    parse_month_key,
    sundays,
)

JAN = month_key(2026, 1)


def test_month_key_round_trip():
    assert JAN == "2026-1"
    assert parse_month_key("2026-12") == (2026, 12)
    with pytest.raises(ValueError):
        parse_month_key("2026-13")
    with pytest.raises(ValueError):
        month_key(2026, 0)


def test_month_helpers():
    assert days_in_month(2024, 2) == 29
    assert is_last_day(2026, 1, 31)
    assert not is_last_day(2026, 1, 30)
    assert sundays(2026, 1) == (4, 11, 18, 25)


def test_default_holidays_are_sundays():
    cal = HolidayCalendar()
    assert cal.effective_holidays(JAN) == (4, 11, 18, 25)
    assert cal.working_days(JAN) == 27


def test_toggle_materializes_default_and_flips_membership():
    cal = HolidayCalendar().toggle(JAN, 26)
    assert cal.holidays[JAN] == (4, 11, 18, 25, 26)
    cal = cal.toggle(JAN, 4)
    assert cal.effective_holidays(JAN) == (11, 18, 25, 26)
    assert cal.working_days(JAN) == 27


def test_toggle_returns_new_calendar():
    base = HolidayCalendar()
    toggled = base.toggle(JAN, 1)
    assert JAN not in base.holidays
    assert toggled is not base


def test_locked_month_ignores_toggles_until_admin():
    cal = HolidayCalendar().finalize(JAN)
    assert cal.is_locked(JAN)
    assert cal.toggle(JAN, 6) is cal
    assert cal.effective_holidays(JAN) == (4, 11, 18, 25)

    edited = cal.toggle(JAN, 6, admin=True)
    assert 6 in edited.effective_holidays(JAN)
    assert edited.is_locked(JAN)


def test_strict_toggle_on_locked_month_raises():
    cal = HolidayCalendar().finalize(JAN)
    with pytest.raises(CalendarLocked):
        cal.toggle(JAN, 6, strict=True)


def test_lock_is_per_month():
    cal = HolidayCalendar().finalize(JAN)
    feb = month_key(2026, 2)
    assert cal.is_editable(feb)
    assert 2 in cal.toggle(feb, 2).effective_holidays(feb)


def test_toggle_rejects_days_outside_month():
    with pytest.raises(ValueError):
        HolidayCalendar().toggle(month_key(2026, 2), 30)


def test_fully_holidayed_month_falls_back():
    cal = HolidayCalendar(holidays={JAN: tuple(range(1, 32))})
    assert cal.working_days(JAN) == FALLBACK_WORKING_DAYS


def test_empty_stored_set_means_no_holidays():
    cal = HolidayCalendar(holidays={JAN: ()})
    assert cal.effective_holidays(JAN) == ()
    assert cal.working_days(JAN) == 31


def test_wire_format_round_trip():
    cal = HolidayCalendar().toggle(JAN, 1).finalize(JAN)
    restored = HolidayCalendar.from_dicts(cal.holidays_to_dict(), cal.locks_to_dict())
    assert restored == cal
