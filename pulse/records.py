from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

RECORD_COLUMNS = [
    "department",
    "team",
    "metric",
    "plan",
    "actual",
    "variance",
    "unit",
    "status",
    "reasoning",
    "report_date",
]

# snapshot wire name -> attribute
_WIRE_NAMES = {"reportDate": "report_date"}


@dataclass(frozen=True)
class Record:
    """One canonical row.

    ``report_date`` unset marks a master-plan row; set, it marks a daily
    achievement row for that exact header string.
    """

    department: str
    metric: str
    plan: float = 0.0
    actual: float = 0.0
    variance: float = 0.0
    unit: str = "Units"
    status: str = "on-track"
    team: Optional[str] = None
    reasoning: Optional[str] = None
    report_date: Optional[str] = None

    @property
    def is_master(self) -> bool:
        return self.report_date is None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            out["reportDate" if key == "report_date" else key] = value
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Record":
        data = {_WIRE_NAMES.get(k, k): v for k, v in raw.items()}
        return cls(
            department=str(data.get("department") or ""),
            metric=str(data.get("metric") or ""),
            plan=_as_float(data.get("plan")),
            actual=_as_float(data.get("actual")),
            variance=_as_float(data.get("variance")),
            unit=str(data.get("unit") or "Units"),
            status=str(data.get("status") or "on-track"),
            team=data.get("team") or None,
            reasoning=data.get("reasoning") or None,
            report_date=data.get("report_date") or None,
        )


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def records_to_dicts(records: Iterable[Record]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]


def records_from_dicts(rows: Optional[Iterable[Dict[str, Any]]]) -> List[Record]:
    return [Record.from_dict(r) for r in (rows or []) if isinstance(r, dict)]


def records_frame(records: Iterable[Record]) -> pd.DataFrame:
    """Records as a DataFrame, preserving snapshot order."""
    rows = [asdict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    for col in ["plan", "actual", "variance"]:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    df["report_date"] = df["report_date"].astype("string")
    return df


# ---------------- Report-date matching ----------------
# Daily rows keep the raw header text, so days are matched by a formatted
# label contained in that text. Every caller goes through these helpers.


def day_label(year: int, month: int, day: int) -> str:
    """Label such as ``January 05, 2026`` for a 1-based month."""
    return f"{MONTH_NAMES[month - 1]} {day:02d}, {year}"


def report_date_matches(report_date: Optional[str], year: int, month: int, day: int) -> bool:
    if not report_date:
        return False
    return day_label(year, month, day).lower() in str(report_date).lower()


def report_date_mask(report_dates: pd.Series, year: int, month: int, day: int) -> pd.Series:
    label = day_label(year, month, day).lower()
    return report_dates.astype("string").str.lower().str.contains(label, regex=False).fillna(False).astype(bool)
