import io
from typing import List, Sequence

import pytest
from openpyxl import Workbook

from pulse.engine import AuditSession
from pulse.store import MemoryBlobStore, SnapshotStore

DAILY_HEADER = "Monday, January 05, 2026"


def build_workbook(rows: Sequence[Sequence[object]], sheet_name: str = "Sales") -> bytes:
    """Serialize rows into an in-memory xlsx with a single sheet."""
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def daily_rows(header: str = DAILY_HEADER, values: Sequence[Sequence[object]] = ()) -> List[List[object]]:
    rows: List[List[object]] = [["Daily Sales Report", ""], [header, ""], ["Row Labels", "Actual"]]
    rows += [list(v) for v in values]
    rows.append(["Grand Total", ""])
    return rows


def master_rows(values: Sequence[Sequence[object]] = ()) -> List[List[object]]:
    rows: List[List[object]] = [["Master Plan 2026", ""], ["Row Labels", "Target"]]
    rows += [list(v) for v in values]
    return rows


@pytest.fixture()
def blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture()
def session(blobs: MemoryBlobStore) -> AuditSession:
    return AuditSession(SnapshotStore(blobs), admin_pin="786")
