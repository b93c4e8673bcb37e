from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from pulse.classifier import Classification, Intent, classify_sheet
from pulse.errors import PersistenceError, UploadError
from pulse.holidays import HolidayCalendar
from pulse.merge import merge_classification
from pulse.store import SEED_RECORDS, Snapshot, SnapshotStore
from pulse.workbook import WorkbookSource, read_sales_grid

logger = logging.getLogger(__name__)

KIND_LABELS = {"master": "Master Plan", "daily": "Daily Achievement"}


# ---------------- Pure transitions: (snapshot, action) -> snapshot ----------------
def apply_upload(snapshot: Snapshot, classification: Classification) -> Snapshot:
    return replace(snapshot, records=tuple(merge_classification(snapshot.records, classification)))


def toggle_holiday(snapshot: Snapshot, key: str, day: int, *, admin: bool = False, strict: bool = False) -> Snapshot:
    calendar = snapshot.calendar.toggle(key, day, admin=admin, strict=strict)
    if calendar is snapshot.calendar:
        return snapshot
    return replace(snapshot, calendar=calendar)


def finalize_month(snapshot: Snapshot, key: str) -> Snapshot:
    return replace(snapshot, calendar=snapshot.calendar.finalize(key))


@dataclass(frozen=True)
class UploadOutcome:
    ok: bool
    message: str
    kind: Intent
    entries_count: int = 0
    report_date: Optional[str] = None
    reason: Optional[str] = None


# ---------------- Stateful shell ----------------
class AuditSession:
    """Holds the current snapshot and the admin-override flag.

    Loads once on construction and commits after every successful mutation.
    A failed commit is logged and the in-memory change stays applied.
    """

    def __init__(self, store: SnapshotStore, *, admin_pin: str = "786") -> None:
        self.store = store
        self.admin_pin = admin_pin
        self.admin_mode = False
        self.snapshot = store.load()

    @property
    def records(self):
        return self.snapshot.records

    @property
    def calendar(self) -> HolidayCalendar:
        return self.snapshot.calendar

    def _commit(self, snapshot: Snapshot) -> bool:
        self.snapshot = snapshot
        try:
            self.store.commit(snapshot)
        except PersistenceError:
            logger.exception("persisting snapshot failed; keeping in-memory state")
            return False
        return True

    def classify(self, source: WorkbookSource, intent: Intent) -> Classification:
        return classify_sheet(read_sales_grid(source), intent)

    def upload(self, source: WorkbookSource, intent: Intent) -> UploadOutcome:
        try:
            classification = self.classify(source, intent)
        except UploadError as exc:
            logger.info("%s upload rejected (%s): %s", intent, exc.reason, exc.message)
            return UploadOutcome(ok=False, message=exc.message, kind=intent, reason=exc.reason)

        self._commit(apply_upload(self.snapshot, classification))
        count = len(classification.entries)
        logger.info("%s upload applied: %d entries, report_date=%r", intent, count, classification.report_date)
        return UploadOutcome(
            ok=True,
            message=f"SUCCESS: {count} products updated in {KIND_LABELS[intent]}.",
            kind=intent,
            entries_count=count,
            report_date=classification.report_date,
        )

    def toggle_holiday(self, key: str, day: int, *, strict: bool = False, admin: Optional[bool] = None) -> bool:
        """Flip a holiday; returns False when the month is locked and nothing changed.

        ``admin`` overrides the session flag for callers that track the
        override per user.
        """
        if admin is None:
            admin = self.admin_mode
        updated = toggle_holiday(self.snapshot, key, day, admin=admin, strict=strict)
        if updated is self.snapshot:
            return False
        self._commit(updated)
        return True

    def finalize_month(self, key: str) -> None:
        self._commit(finalize_month(self.snapshot, key))

    def verify_pin(self, pin: str) -> bool:
        return pin == self.admin_pin

    def enable_admin(self, pin: str) -> bool:
        if not self.verify_pin(pin):
            logger.info("admin override refused: invalid pin")
            return False
        self.admin_mode = True
        return True

    def disable_admin(self) -> None:
        self.admin_mode = False

    def reset(self) -> None:
        self._commit(Snapshot(records=SEED_RECORDS))
