from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from pulse.allocation import daily_target
from pulse.catalog import SALES_TEAMS
from pulse.charts import to_vega_spec
from pulse.filters import AuditFilters, AuditThresholds
from pulse.holidays import HolidayCalendar, is_last_day, month_key
from pulse.records import Record, day_label, records_frame, report_date_mask

PLAN_NOT_UPLOADED = "plan_not_uploaded"
ALL_TARGETS_MET = "all_targets_met"
SHORTFALL = "shortfall"


def shortfall_severity(gap: float, thresholds: AuditThresholds) -> str:
    if gap > thresholds.severe:
        return "severe"
    if gap > thresholds.moderate:
        return "moderate"
    return "minor"


def master_rows(df: pd.DataFrame, team: str) -> pd.DataFrame:
    return df[(df["team"] == team) & (df["plan"] > 0) & df["report_date"].isna()]


def _divisions_chart(divisions: List[Dict[str, Any]]) -> Dict[str, Any]:
    long_df = pd.DataFrame(divisions).melt(
        id_vars="team", value_vars=["target", "achieved"], var_name="series", value_name="value"
    )
    long_df["series"] = long_df["series"].map({"target": "Trend Target", "achieved": "Daily Actual"})
    chart = (
        alt.Chart(long_df)
        .mark_bar(cornerRadiusTopLeft=6, cornerRadiusTopRight=6)
        .encode(
            x=alt.X("team:N", title=None, sort=SALES_TEAMS),
            xOffset="series:N",
            y=alt.Y("value:Q", title="Units", axis=alt.Axis(format="~s")),
            color=alt.Color(
                "series:N",
                scale=alt.Scale(domain=["Trend Target", "Daily Actual"], range=["#1e293b", "#dc2626"]),
                title=None,
            ),
            tooltip=["team", "series", alt.Tooltip("value:Q", format=",")],
        )
    )
    return to_vega_spec(chart)


def compute_day_audit(
    filters: AuditFilters,
    records: Sequence[Record],
    calendar: HolidayCalendar,
) -> Dict[str, Any]:
    """Target vs achieved per team and product for the focused day.

    Each master row's achieved value is the first daily row (snapshot order)
    for the same product whose report date matches the day. Holidays are not
    zeroed in this view.
    """
    if filters.focused_day is None:
        raise ValueError("focused_day is required for a day audit")
    year, month, day = filters.year, filters.month, filters.focused_day

    df = records_frame(records)
    working_days = calendar.working_days(month_key(year, month))
    day_mask = report_date_mask(df["report_date"], year, month, day)
    achieved_by_metric = (
        df[day_mask].drop_duplicates(subset=["metric"], keep="first").set_index("metric")["actual"].to_dict()
    )

    divisions: List[Dict[str, Any]] = []
    teams: List[Dict[str, Any]] = []
    for team in SALES_TEAMS:
        masters = master_rows(df, team)
        rows: List[Dict[str, Any]] = []
        for r in masters.itertuples(index=False):
            target = daily_target(float(r.plan), day, month, year, working_days)
            achieved = float(achieved_by_metric.get(r.metric, 0.0))
            rows.append({"metric": r.metric, "target": target, "achieved": achieved, "gap": target - achieved})

        team_target = sum(row["target"] for row in rows)
        team_achieved = sum(row["achieved"] for row in rows)
        divisions.append({"team": team, "target": team_target, "achieved": team_achieved})

        if masters.empty:
            teams.append({"team": team, "status": PLAN_NOT_UPLOADED, "shortfalls": []})
            continue
        shortfalls = [
            {**row, "severity": shortfall_severity(row["gap"], filters.thresholds)} for row in rows if row["gap"] > 0
        ]
        teams.append(
            {
                "team": team,
                "status": SHORTFALL if shortfalls else ALL_TARGETS_MET,
                "target": team_target,
                "achieved": team_achieved,
                "shortfalls": shortfalls,
            }
        )

    return {
        "filters": asdict(filters),
        "date_label": day_label(year, month, day),
        "is_last_day": is_last_day(year, month, day),
        "has_daily_report": bool(day_mask.any()),
        "working_days": working_days,
        "divisions": divisions,
        "teams": teams,
        "charts": {"divisions": _divisions_chart(divisions)},
    }
