import pytest

from pulse.allocation import daily_target, month_targets
from pulse.filters import AuditFilters, AuditThresholds, normalize_filters
from pulse.holidays import HolidayCalendar, month_key
from pulse.metrics_shortfall import (
    ALL_TARGETS_MET,
    PLAN_NOT_UPLOADED,
    SHORTFALL,
    compute_day_audit,
    shortfall_severity,
)
from pulse.metrics_trend import compute_month_trend
from pulse.records import Record, day_label, report_date_matches

JAN = month_key(2026, 1)
DAY = "Monday, January 05, 2026"


def _master(team, metric, plan):
    return Record(department="Sales", team=team, metric=metric, plan=plan)


def _daily(team, metric, actual, report_date=DAY):
    return Record(department="Sales", team=team, metric=metric, actual=actual, report_date=report_date)


@pytest.fixture()
def records():
    return [
        Record(department="Production", metric="Sample Tablet Compression", plan=5000000, actual=4200000),
        _master("Achievers", "Vonz Tab 10mg 30s", 3100),
        _master("Achievers", "Atoxan 30mg Tab.", 3100),
        _master("Achievers", "Asvon Tab 10/100mg 30s", 3100),
        _master("Achievers", "Pentallin Syp. IVY", 3100),
        _master("Concord", "Panadol 500mg", 325),
        _daily("Achievers", "Vonz Tab 10mg 30s", 30),
        _daily("Achievers", "Atoxan 30mg Tab.", 80),
        _daily("Achievers", "Asvon Tab 10/100mg 30s", 90),
        _daily("Achievers", "Pentallin Syp. IVY", 100),
        _daily("Concord", "Panadol 500mg", 10),
        _daily("Achievers", "Vonz Tab 10mg 30s", 500, report_date="MONDAY, JANUARY 05, 2026"),
    ]


@pytest.fixture()
def calendar():
    # one holiday in a 31-day month -> 30 working days, 32.5 weight units
    return HolidayCalendar(holidays={JAN: (25,)})


def _team(payload, name):
    return next(t for t in payload["teams"] if t["team"] == name)


def test_day_label_and_substring_matching():
    assert day_label(2026, 1, 5) == "January 05, 2026"
    assert report_date_matches(DAY, 2026, 1, 5)
    assert report_date_matches("january 05, 2026 (Mon)", 2026, 1, 5)
    assert not report_date_matches("Jan 5, 2026", 2026, 1, 5)
    assert not report_date_matches(None, 2026, 1, 5)


def test_day_audit_tiers_shortfalls(records, calendar):
    payload = compute_day_audit(AuditFilters(year=2026, month=1, focused_day=5), records, calendar)

    assert payload["date_label"] == "January 05, 2026"
    assert payload["working_days"] == 30
    assert payload["has_daily_report"] is True
    assert payload["is_last_day"] is False

    achievers = _team(payload, "Achievers")
    assert achievers["status"] == SHORTFALL
    assert achievers["target"] == 4 * 95
    # first matching daily row wins for each product
    assert achievers["achieved"] == 30 + 80 + 90 + 100
    assert [(s["metric"], s["gap"], s["severity"]) for s in achievers["shortfalls"]] == [
        ("Vonz Tab 10mg 30s", 65, "severe"),
        ("Atoxan 30mg Tab.", 15, "moderate"),
        ("Asvon Tab 10/100mg 30s", 5, "minor"),
    ]

    assert _team(payload, "Concord")["status"] == ALL_TARGETS_MET
    assert _team(payload, "Passionate")["status"] == PLAN_NOT_UPLOADED
    assert _team(payload, "Dynamic")["status"] == PLAN_NOT_UPLOADED

    divisions = {d["team"]: d for d in payload["divisions"]}
    assert divisions["Concord"] == {"team": "Concord", "target": 10, "achieved": 10.0}
    assert divisions["Dynamic"]["target"] == 0
    assert "$schema" in payload["charts"]["divisions"]


def test_day_audit_without_daily_report(records, calendar):
    payload = compute_day_audit(AuditFilters(year=2026, month=1, focused_day=6), records, calendar)
    assert payload["has_daily_report"] is False
    assert _team(payload, "Concord")["status"] == SHORTFALL


def test_day_audit_last_day_uses_closing_weight(records, calendar):
    payload = compute_day_audit(AuditFilters(year=2026, month=1, focused_day=31), records, calendar)
    assert payload["is_last_day"] is True
    vonz = next(s for s in _team(payload, "Achievers")["shortfalls"] if s["metric"] == "Vonz Tab 10mg 30s")
    assert vonz["target"] == 334


def test_day_audit_does_not_zero_holidays(records, calendar):
    payload = compute_day_audit(AuditFilters(year=2026, month=1, focused_day=25), records, calendar)
    assert _team(payload, "Achievers")["target"] == 4 * 95


def test_day_audit_requires_focused_day(records, calendar):
    with pytest.raises(ValueError):
        compute_day_audit(AuditFilters(year=2026, month=1), records, calendar)


def test_custom_thresholds():
    thresholds = AuditThresholds(severe=100, moderate=60)
    assert shortfall_severity(65, thresholds) == "moderate"
    assert shortfall_severity(101, thresholds) == "severe"
    assert shortfall_severity(60, thresholds) == "minor"


def test_month_trend_series(records, calendar):
    payload = compute_month_trend(AuditFilters(year=2026, month=1), records, calendar)
    days = payload["days"]

    assert len(days) == 31
    assert payload["total_monthly_target"] == 4 * 3100 + 325
    assert days[24]["is_holiday"] is True and days[24]["target"] == 0
    assert days[4]["target"] == daily_target(12725, 5, 1, 2026, 30) == 392
    assert days[30]["target"] == 1370

    day5 = days[4]
    assert day5["teams"]["Achievers"] == 30 + 80 + 90 + 100 + 500
    assert day5["teams"]["Concord"] == 10
    assert day5["teams"]["Passionate"] == 0
    assert day5["total_actual"] == 810
    assert days[5]["total_actual"] == 0
    assert "$schema" in payload["charts"]["trend"]


def test_month_trend_zeroes_default_sundays(records):
    payload = compute_month_trend(AuditFilters(year=2026, month=1), records, HolidayCalendar())
    sundays = [d["day"] for d in payload["days"] if d["is_holiday"]]
    assert sundays == [4, 11, 18, 25]
    assert all(d["target"] == 0 for d in payload["days"] if d["is_holiday"])


def test_month_trend_with_no_records():
    payload = compute_month_trend(AuditFilters(year=2026, month=2), [], HolidayCalendar())
    assert payload["total_monthly_target"] == 0
    assert all(d["target"] == 0 and d["total_actual"] == 0 for d in payload["days"])


def test_normalize_filters_clamps_values():
    f = normalize_filters({"year": "2026", "month": 14, "focused_day": 40, "thresholds": {"severe": 70}})
    assert (f.year, f.month, f.focused_day) == (2026, 12, 31)
    assert f.thresholds == AuditThresholds(severe=70.0, moderate=10.0)


def test_month_trend_targets_come_from_month_targets(records, calendar):
    payload = compute_month_trend(AuditFilters(year=2026, month=1), records, calendar)
    assert [d["target"] for d in payload["days"]] == month_targets(12725, calendar, 2026, 1)
