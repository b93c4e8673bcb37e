from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

from pulse.errors import PersistenceError
from pulse.holidays import HolidayCalendar
from pulse.records import Record, records_from_dicts, records_to_dicts

logger = logging.getLogger(__name__)

RECORDS_KEY = "operationData"
HOLIDAYS_KEY = "holidaysMap"
LOCKS_KEY = "locksMap"

SEED_RECORDS = (
    Record(
        department="Production",
        metric="Sample Tablet Compression",
        plan=5000000,
        actual=4200000,
        variance=-800000,
        unit="Tabs",
        status="critical",
        reasoning="Initial system load. Use Data Entry to upload Excel files.",
    ),
)


@dataclass(frozen=True)
class Snapshot:
    records: Tuple[Record, ...] = ()
    calendar: HolidayCalendar = field(default_factory=HolidayCalendar)


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...


class MemoryBlobStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._blobs: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._blobs.get(key)

    def put(self, key: str, value: Any) -> None:
        self._blobs[key] = value


class JsonDirectoryStore:
    """One JSON file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def put(self, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, indent=2)
            os.replace(tmp, self._path(key))
        except Exception:
            Path(tmp).unlink(missing_ok=True)
            raise


class SnapshotStore:
    """Loads and commits the whole engine snapshot through a blob store."""

    def __init__(self, blobs: BlobStore) -> None:
        self.blobs = blobs

    def load(self) -> Snapshot:
        try:
            raw_records = self.blobs.get(RECORDS_KEY)
            raw_holidays = self.blobs.get(HOLIDAYS_KEY)
            raw_locks = self.blobs.get(LOCKS_KEY)
        except Exception:
            logger.exception("snapshot load failed; starting from seed data")
            return Snapshot(records=SEED_RECORDS)

        records = tuple(records_from_dicts(raw_records)) if raw_records is not None else SEED_RECORDS
        calendar = HolidayCalendar.from_dicts(raw_holidays, raw_locks)
        return Snapshot(records=records, calendar=calendar)

    def commit(self, snapshot: Snapshot) -> None:
        try:
            self.blobs.put(RECORDS_KEY, records_to_dicts(snapshot.records))
            self.blobs.put(HOLIDAYS_KEY, snapshot.calendar.holidays_to_dict())
            self.blobs.put(LOCKS_KEY, snapshot.calendar.locks_to_dict())
        except Exception as exc:
            raise PersistenceError(f"snapshot commit failed: {exc}") from exc
