import sqlite3

import pytest

from tests.session_helpers import seed_running_db
from workout_progress.adapters import local_db
from workout_progress.analysis.insight import SLOWER
from workout_progress.dashboard.progress_view import ProgressView
from workout_progress.domain.progress import ComparisonStatus


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "running.db"
    seed_running_db(path)
    return str(path)


def test_fetch_sessions(db_path):
    sessions = local_db.fetch_sessions(db_path)

    assert [s.id for s in sessions] == ["2", "4", "3", "1"]
    manual = next(s for s in sessions if s.id == "3")
    assert manual.telemetry_ref is None
    assert sessions[0].telemetry_ref == 2
    assert sessions[0].distance_m == 9100.0
    assert sessions[0].duration_s == 2750


def test_fetch_sessions_filters_and_limits(db_path):
    runs = local_db.fetch_sessions(db_path, sport_types=("Run",))
    assert {s.id for s in runs} == {"1", "2", "3"}
    assert len(local_db.fetch_sessions(db_path, limit=1)) == 1


def test_fetch_laps_in_lap_order(db_path):
    laps = local_db.fetch_laps(db_path, 2)
    assert len(laps) == 5
    assert laps[0].elapsed_time_s == 242
    assert laps[0].max_heartrate == 163.0
    assert local_db.fetch_laps(db_path, 999) == []


def test_synced_db_without_totals_is_read_without_changes(tmp_path):
    path = tmp_path / "synced.db"
    conn = sqlite3.connect(str(path))
    conn.execute("""
        CREATE TABLE activities (
            activity_id INTEGER PRIMARY KEY, name TEXT, sport_type TEXT,
            start_date_local TEXT, manual INTEGER
        )
    """)
    conn.execute("INSERT INTO activities VALUES (7, 'Carrera', 'Run', '2025-01-02T08:00:00Z', 0)")
    conn.commit()
    conn.close()
    before = path.read_bytes()

    sessions = local_db.fetch_sessions(str(path))

    assert len(sessions) == 1
    assert sessions[0].distance_m is None
    assert sessions[0].duration_s is None
    assert local_db.fetch_laps(str(path), 7) == []
    assert path.read_bytes() == before
    conn = sqlite3.connect(str(path))
    assert local_db.table_columns(conn, "activities") == [
        "activity_id", "name", "sport_type", "start_date_local", "manual",
    ]
    assert not local_db.table_exists(conn, "laps_st")
    conn.close()


def test_missing_db_is_not_created(tmp_path):
    path = tmp_path / "absent.db"

    with pytest.raises(sqlite3.OperationalError):
        local_db.fetch_sessions(str(path))
    assert not path.exists()


def test_progress_view_over_sqlite(db_path):
    view = ProgressView(local_db.make_history_source(db_path), local_db.make_lap_source(db_path))
    view.refresh()

    snap = view.select(view.default_type())

    assert snap.status == ComparisonStatus.COMPARED
    assert snap.comparison.worsened == 5
    assert snap.insight == SLOWER
