from __future__ import annotations

from dataclasses import asdict
import logging
import math
from functools import lru_cache
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import AdminPinModel, AuditFiltersModel
from pulse.catalog import PRODUCT_CATALOG, SALES_TEAMS
from pulse.engine import AuditSession
from pulse.errors import CalendarLocked
from pulse.filters import AuditFilters, normalize_filters
from pulse.holidays import month_key
from pulse.metrics_shortfall import compute_day_audit
from pulse.metrics_trend import compute_month_trend
from pulse.records import records_frame, records_to_dicts
from pulse.settings import load_settings
from pulse.store import JsonDirectoryStore, SnapshotStore
from pulse.summary import OpenAISummarizer, Summarizer, board_alert, summarize_operations

settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

app = FastAPI(title="Sales Pulse API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_session() -> AuditSession:
    store = SnapshotStore(JsonDirectoryStore(settings.data_dir))
    return AuditSession(store, admin_pin=settings.admin_pin)


def get_summarizer() -> Optional[Summarizer]:
    try:
        return OpenAISummarizer(model=settings.summary_model)
    except Exception as exc:
        logger.warning("summarizer unavailable: %s", exc)
        return None


def _filters_from_model(model: AuditFiltersModel) -> AuditFilters:
    return normalize_filters(model.model_dump())


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _calendar_payload(session: AuditSession, year: int, month: int) -> dict:
    key = month_key(year, month)
    cal = session.calendar
    return {
        "month_key": key,
        "holidays": sorted(cal.effective_holidays(key)),
        "locked": cal.is_locked(key),
        "editable": cal.is_editable(key, admin=session.admin_mode),
        "working_days": cal.working_days(key),
        "admin_mode": session.admin_mode,
    }


@app.get("/meta/teams")
def meta_teams():
    return _json({"teams": SALES_TEAMS, "products": PRODUCT_CATALOG})


@app.get("/records")
def list_records(session: AuditSession = Depends(get_session)):
    return _json({"records": records_to_dicts(session.records)})


@app.get("/records/export")
def export_records(session: AuditSession = Depends(get_session)):
    csv_bytes = records_frame(session.records).to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=records.csv"},
    )


@app.post("/upload/{intent}")
def upload(
    intent: str,
    file: UploadFile = File(...),
    session: AuditSession = Depends(get_session),
):
    if intent not in ("master", "daily"):
        return _error(ValueError(f"unknown upload intent: {intent}"), status_code=404)
    try:
        content = file.file.read()
    except Exception as exc:
        logger.exception("reading upload failed")
        return _error(exc)
    try:
        outcome = session.upload(content, intent)
        return _json(asdict(outcome), status_code=200 if outcome.ok else 400)
    except Exception as exc:
        logger.exception("upload failed")
        return _error(exc)


@app.get("/calendar/{year}/{month}")
def get_calendar(year: int, month: int, session: AuditSession = Depends(get_session)):
    try:
        return _json(_calendar_payload(session, year, month))
    except ValueError as exc:
        return _error(exc, status_code=400)


@app.post("/calendar/{year}/{month}/toggle/{day}")
def toggle_calendar_day(year: int, month: int, day: int, session: AuditSession = Depends(get_session)):
    try:
        session.toggle_holiday(month_key(year, month), day, strict=True)
        return _json(_calendar_payload(session, year, month))
    except CalendarLocked as exc:
        return _error(exc, status_code=409)
    except ValueError as exc:
        return _error(exc, status_code=400)


@app.post("/calendar/{year}/{month}/finalize")
def finalize_calendar(year: int, month: int, session: AuditSession = Depends(get_session)):
    try:
        session.finalize_month(month_key(year, month))
        return _json(_calendar_payload(session, year, month))
    except ValueError as exc:
        return _error(exc, status_code=400)


@app.post("/admin")
def enable_admin(body: AdminPinModel, session: AuditSession = Depends(get_session)):
    if not session.enable_admin(body.pin):
        return JSONResponse(status_code=403, content={"error": "Invalid PIN.", "admin_mode": False})
    return _json({"admin_mode": True})


@app.delete("/admin")
def disable_admin(session: AuditSession = Depends(get_session)):
    session.disable_admin()
    return _json({"admin_mode": False})


@app.post("/audit/day")
def audit_day(filters: AuditFiltersModel, session: AuditSession = Depends(get_session)):
    try:
        f = _filters_from_model(filters)
        if f.focused_day is None:
            return _error(ValueError("focused_day is required"), status_code=400)
        return _json(compute_day_audit(f, session.records, session.calendar))
    except Exception as exc:
        logger.exception("audit_day failed")
        return _error(exc)


@app.post("/audit/trend")
def audit_trend(filters: AuditFiltersModel, session: AuditSession = Depends(get_session)):
    try:
        f = _filters_from_model(filters)
        return _json(compute_month_trend(f, session.records, session.calendar))
    except Exception as exc:
        logger.exception("audit_trend failed")
        return _error(exc)


@app.post("/summary")
def summary(
    session: AuditSession = Depends(get_session),
    summarizer: Optional[Summarizer] = Depends(get_summarizer),
):
    result = summarize_operations(session.records, summarizer, limit=settings.summary_limit)
    return _json(result.to_dict())


@app.post("/summary/board-alert")
def summary_board_alert(
    session: AuditSession = Depends(get_session),
    summarizer: Optional[Summarizer] = Depends(get_summarizer),
):
    return _json({"whatsappMessage": board_alert(session.records, summarizer)})
