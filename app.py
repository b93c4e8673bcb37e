import calendar
from contextlib import contextmanager
from datetime import date
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from pulse.engine import AuditSession
from pulse.filters import AuditFilters
from pulse.holidays import days_in_month, month_key
from pulse.metrics_shortfall import PLAN_NOT_UPLOADED, compute_day_audit
from pulse.metrics_trend import compute_month_trend
from pulse.records import MONTH_NAMES, records_frame
from pulse.settings import load_settings
from pulse.store import JsonDirectoryStore, SnapshotStore
from pulse.summary import OpenAISummarizer, summarize_operations
from pulse.workbook import UPLOAD_EXTENSIONS

alt.data_transformers.disable_max_rows()
settings = load_settings()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #dc2626;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )


@st.cache_resource(show_spinner=False)
def get_session() -> AuditSession:
    return AuditSession(SnapshotStore(JsonDirectoryStore(settings.data_dir)), admin_pin=settings.admin_pin)


# ---------- UI setup ----------
st.set_page_config(page_title="Sales Pulse", layout="wide")
inject_base_styles()
st.title("Sales Pulse")
st.caption("Master plan vs daily achievement, weighted by working days.")

session = get_session()

with st.sidebar:
    st.markdown("### Navigate")
    page = st.radio("Navigate", ["Dashboard", "Data Entry"], index=0)
    st.markdown("---")
    today = date.today()
    year = st.number_input("Year", min_value=2020, max_value=2039, value=today.year, step=1)
    month = st.selectbox("Month", options=list(range(1, 13)), index=today.month - 1, format_func=lambda m: MONTH_NAMES[m - 1])
    key = month_key(int(year), int(month))
    st.markdown("---")
    # the session object is shared across browsers; the override is per browser
    if st.session_state.get("admin_mode"):
        if st.button("ADMIN MODE: ON (turn off)"):
            st.session_state["admin_mode"] = False
            st.rerun()
    else:
        pin = st.text_input("Admin override PIN", type="password")
        if st.button("Enable admin mode") and pin:
            if session.verify_pin(pin):
                st.session_state["admin_mode"] = True
                st.rerun()
            else:
                st.error("Invalid PIN.")


# ----- Page renderers -----
def render_upload(intent: str):
    label = "Daily Achievement" if intent == "daily" else "Master Plan"
    with card(f"{label} upload", actions="Sales sheet required"):
        uploaded = st.file_uploader(f"Select {label} file", type=UPLOAD_EXTENSIONS, key=f"upload_{intent}")
        if uploaded is not None and st.button(f"Import {label}", key=f"import_{intent}"):
            outcome = session.upload(uploaded.getvalue(), intent)
            if outcome.ok:
                st.success(outcome.message)
            else:
                st.error(outcome.message)


def render_working_days():
    cal = session.calendar
    admin = bool(st.session_state.get("admin_mode"))
    locked = cal.is_locked(key)
    editable = cal.is_editable(key, admin=admin)
    holidays = set(cal.effective_holidays(key))
    with card(f"{MONTH_NAMES[int(month) - 1]} {int(year)}", actions=f"Net working days: {cal.working_days(key)}"):
        if locked and not admin:
            st.success("Configuration finalized. Use the admin override to make changes.")
        weeks = calendar.Calendar(firstweekday=6).monthdayscalendar(int(year), int(month))
        header = st.columns(7)
        for col, name in zip(header, ["SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"]):
            col.caption(name)
        for week in weeks:
            cols = st.columns(7)
            for col, day in zip(cols, week):
                if not day:
                    continue
                text = f"{day} (off)" if day in holidays else str(day)
                if col.button(text, key=f"day_{key}_{day}", disabled=not editable):
                    session.toggle_holiday(key, day, admin=admin)
                    st.rerun()
        if not locked or admin:
            if st.button(f"Finalize {cal.working_days(key)} working days"):
                session.finalize_month(key)
                st.rerun()


def render_data_entry_page():
    render_page_header("Data Entry", "Home / Data Entry", export_df=records_frame(session.records), export_name="records.csv")
    tabs = st.tabs(["Daily Achievement", "Master Plan", "Working Days"])
    with tabs[0]:
        render_upload("daily")
    with tabs[1]:
        render_upload("master")
    with tabs[2]:
        render_working_days()


def render_day_audit(day: int):
    payload = compute_day_audit(AuditFilters(year=int(year), month=int(month), focused_day=day), session.records, session.calendar)
    st.subheader(f"Shortfall Audit - {MONTH_NAMES[int(month) - 1]} {day}, {int(year)}")
    st.caption("Trend-based month closing target" if payload["is_last_day"] else "Daily weighted target")
    st.vega_lite_chart(payload["charts"]["divisions"], use_container_width=True)
    if not payload["has_daily_report"]:
        st.warning("Daily achievement is not available for this date.")
        return
    for team in payload["teams"]:
        if team["status"] == PLAN_NOT_UPLOADED:
            st.info(f"{team['team']}: master plan not uploaded.")
        elif not team["shortfalls"]:
            st.success(f"{team['team']}: all targets met.")
        else:
            with card(f"{team['team']} shortfall list"):
                st.dataframe(pd.DataFrame(team["shortfalls"]), hide_index=True, use_container_width=True)


def render_dashboard_page():
    render_page_header("Dashboard", "Home / Dashboard")
    filters = AuditFilters(year=int(year), month=int(month))
    trend = compute_month_trend(filters, session.records, session.calendar)
    with card("Multi-team achievement trajectory", actions=f"{trend['working_days']} working days"):
        st.vega_lite_chart(trend["charts"]["trend"], use_container_width=True)

    day = st.selectbox("Focus day", options=list(range(1, days_in_month(int(year), int(month)) + 1)), index=None)
    if day:
        render_day_audit(int(day))

    with card("Executive summary"):
        if st.button("Generate summary"):
            try:
                summarizer = OpenAISummarizer(model=settings.summary_model)
            except Exception as exc:
                st.warning(f"Summarizer unavailable: {exc}")
                summarizer = None
            result = summarize_operations(session.records, summarizer, limit=settings.summary_limit)
            st.markdown(f"**{result.executive_summary}**")
            st.markdown(result.detailed_analysis)
            for action in result.actions:
                st.markdown(f"- {action}")
            st.caption(f"Reading time: {result.reading_time_minutes:g} min")


if page == "Dashboard":
    render_dashboard_page()
else:
    render_data_entry_page()
