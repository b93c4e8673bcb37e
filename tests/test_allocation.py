from pulse.allocation import LAST_DAY_WEIGHT, daily_target, month_targets, round_half_up, total_weight_units
from pulse.holidays import HolidayCalendar, month_key


def test_weight_units():
    assert LAST_DAY_WEIGHT == 3.5
    assert total_weight_units(31) == 33.5
    assert total_weight_units(30) == 32.5
    assert total_weight_units(26) == 28.5


def test_daily_target_thirty_working_days():
    assert daily_target(3100, 5, 1, 2026, 30) == 95
    assert daily_target(3100, 31, 1, 2026, 30) == 334


def test_daily_target_thirty_one_working_days():
    assert daily_target(3100, 5, 1, 2026, 31) == 93
    assert daily_target(3100, 31, 1, 2026, 31) == 324


def test_last_day_weighting_and_rounding_drift():
    normal = daily_target(2600, 10, 1, 2026, 26)
    last = daily_target(2600, 31, 1, 2026, 26)
    assert normal == 91
    assert last == 319
    assert abs(last - normal * LAST_DAY_WEIGHT) <= LAST_DAY_WEIGHT
    assert abs(normal * 25 + last - 2600) <= 26


def test_last_day_is_weighted_even_on_holiday_when_called_directly():
    # Jan 31 2026 is a Saturday; allocation ignores holiday status.
    assert daily_target(3100, 31, 1, 2026, 26) == round_half_up(3100 / 28.5 * 3.5)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(95.38) == 95
    assert round_half_up(333.846) == 334


def test_month_targets_zero_holidays():
    cal = HolidayCalendar()
    targets = month_targets(2700, cal, 2026, 1)
    assert len(targets) == 31
    for day in (4, 11, 18, 25):
        assert targets[day - 1] == 0
    wd = cal.working_days(month_key(2026, 1))
    assert targets[0] == daily_target(2700, 1, 1, 2026, wd)
    assert targets[30] == daily_target(2700, 31, 1, 2026, wd)
