from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from pulse.allocation import month_targets
from pulse.catalog import SALES_DEPARTMENT, SALES_TEAMS
from pulse.charts import TEAM_COLORS, to_vega_spec
from pulse.filters import AuditFilters
from pulse.holidays import HolidayCalendar, month_key
from pulse.records import Record, records_frame, report_date_mask


def total_sales_plan(df: pd.DataFrame) -> float:
    masters = df[(df["department"] == SALES_DEPARTMENT) & (df["plan"] > 0) & df["report_date"].isna()]
    return float(masters["plan"].sum())


def _trend_chart(days: List[Dict[str, Any]]) -> Dict[str, Any]:
    wide = pd.DataFrame([{"day": d["day"], "Target": d["target"], **d["teams"]} for d in days])
    long_df = wide.melt(id_vars="day", var_name="series", value_name="value")
    domain = ["Target"] + SALES_TEAMS
    colors = ["#94a3b8"] + [TEAM_COLORS[t] for t in SALES_TEAMS]
    chart = (
        alt.Chart(long_df)
        .mark_line(point=True)
        .encode(
            x=alt.X("day:O", title="Day"),
            y=alt.Y("value:Q", title="Units", axis=alt.Axis(format="~s")),
            color=alt.Color("series:N", scale=alt.Scale(domain=domain, range=colors), title=None),
            strokeDash=alt.condition(alt.datum.series == "Target", alt.value([6, 4]), alt.value([1, 0])),
            tooltip=["day", "series", alt.Tooltip("value:Q", format=",")],
        )
    )
    return to_vega_spec(chart)


def compute_month_trend(
    filters: AuditFilters,
    records: Sequence[Record],
    calendar: HolidayCalendar,
) -> Dict[str, Any]:
    year, month = filters.year, filters.month
    key = month_key(year, month)
    df = records_frame(records)

    working_days = calendar.working_days(key)
    holidays = set(calendar.effective_holidays(key))
    total_plan = total_sales_plan(df)
    targets = month_targets(total_plan, calendar, year, month)

    days: List[Dict[str, Any]] = []
    for day, target in enumerate(targets, start=1):
        is_holiday = day in holidays
        realized = df[report_date_mask(df["report_date"], year, month, day)].groupby("team")["actual"].sum()
        team_actuals = {team: float(realized.get(team, 0.0)) for team in SALES_TEAMS}
        days.append(
            {
                "day": day,
                "target": target,
                "teams": team_actuals,
                "total_actual": sum(team_actuals.values()),
                "is_holiday": is_holiday,
            }
        )

    return {
        "filters": asdict(filters),
        "month_key": key,
        "working_days": working_days,
        "total_monthly_target": total_plan,
        "days": days,
        "charts": {"trend": _trend_chart(days)},
    }
