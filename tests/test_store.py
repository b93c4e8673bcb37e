from pulse.holidays import HolidayCalendar
from pulse.records import Record
from pulse.settings import load_settings
from pulse.store import RECORDS_KEY, SEED_RECORDS, JsonDirectoryStore, Snapshot, SnapshotStore


def test_json_directory_store_roundtrip(tmp_path):
    store = SnapshotStore(JsonDirectoryStore(tmp_path / "state"))
    snapshot = Snapshot(
        records=(Record(department="Sales", team="Concord", metric="Panadol 500mg", actual=4, report_date="x"),),
        calendar=HolidayCalendar(holidays={"2026-1": (1, 2)}, locks={"2026-1": True}),
    )
    store.commit(snapshot)

    assert (tmp_path / "state" / f"{RECORDS_KEY}.json").exists()
    assert not list((tmp_path / "state").glob("*.tmp"))
    loaded = store.load()
    assert loaded.records == snapshot.records
    assert loaded.calendar.effective_holidays("2026-1") == (1, 2)
    assert loaded.calendar.is_locked("2026-1")


def test_empty_directory_loads_seed(tmp_path):
    assert SnapshotStore(JsonDirectoryStore(tmp_path)).load().records == SEED_RECORDS


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("PULSE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PULSE_SUMMARY_LIMIT", "oops")
    monkeypatch.setenv("PULSE_CORS_ORIGINS", "http://a, http://b")
    monkeypatch.delenv("PULSE_ADMIN_PIN", raising=False)
    settings = load_settings(tmp_path / "missing.env")
    assert settings.data_dir == tmp_path
    assert settings.summary_limit == 300
    assert settings.admin_pin == "786"
    assert settings.cors_origins == ["http://a", "http://b"]
