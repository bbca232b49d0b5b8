import logging
import sqlite3
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from workout_progress.adapters.parsing import build_session
from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

DB_PATH = "running.db"


# -----------------------
# Schéma (tables issues de la synchro Strava)
# -----------------------
def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    cur = conn.cursor()
    cur.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?;",
        (table,),
    )
    return cur.fetchone() is not None


def table_columns(conn: sqlite3.Connection, table: str) -> List[str]:
    cur = conn.cursor()
    cur.execute(f"PRAGMA table_info({table});")
    return [r[1] for r in cur.fetchall()]  # r[1] = name


def ensure_column(conn: sqlite3.Connection, table: str, col: str, col_def: str) -> None:
    """
    Ajoute la colonne si absente. col_def ex: "distance_m REAL"
    """
    if not table_exists(conn, table):
        return
    if col in set(table_columns(conn, table)):
        return
    conn.execute(f"ALTER TABLE {table} ADD COLUMN {col_def};")


def init_db(db_path: str = DB_PATH) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    cur = conn.cursor()

    cur.execute("""
    CREATE TABLE IF NOT EXISTS activities (
        activity_id INTEGER PRIMARY KEY,
        name TEXT,
        type TEXT,
        sport_type TEXT,
        start_date_local TEXT,
        manual INTEGER,
        distance_m REAL,
        moving_time_s INTEGER,
        streams_status TEXT
    );
    """)

    # anciennes bases: colonnes totaux absentes
    ensure_column(conn, "activities", "distance_m", "distance_m REAL")
    ensure_column(conn, "activities", "moving_time_s", "moving_time_s INTEGER")

    cur.execute("""
    CREATE TABLE IF NOT EXISTS laps_st (
        activity_id INTEGER,
        lap_index INTEGER,
        name TEXT,
        elapsed_time_s INTEGER,
        moving_time_s INTEGER,
        start_index INTEGER,
        end_index INTEGER,
        distance_m REAL,
        average_speed_m_s REAL,
        average_heartrate_bpm REAL,
        max_heartrate_bpm REAL,
        average_cadence_rpm REAL,
        PRIMARY KEY (activity_id, lap_index)
    );
    """)
    cur.execute("CREATE INDEX IF NOT EXISTS idx_laps_st_act ON laps_st(activity_id, lap_index);")

    conn.commit()
    return conn


# -----------------------
# Lecture (base ouverte en lecture seule)
# -----------------------
def connect_readonly(db_path: str) -> sqlite3.Connection:
    """
    Jamais de création ni de migration côté lecture : fichier absent => sqlite3.OperationalError.
    """
    uri = Path(db_path).resolve().as_uri() + "?mode=ro"
    return sqlite3.connect(uri, uri=True)


def _column_or_null(columns: Sequence[str], col: str) -> str:
    # bases synchronisées sans les totaux: NULL à la place
    return col if col in columns else f"NULL AS {col}"


def fetch_sessions(db_path: str = DB_PATH,
                   limit: int = 50,
                   sport_types: Optional[Sequence[str]] = None) -> List[CompletedSession]:
    conn = connect_readonly(db_path)
    try:
        if not table_exists(conn, "activities"):
            logger.warning("SQLite %s: table activities absente", db_path)
            return []

        columns = table_columns(conn, "activities")
        select = ", ".join([
            "activity_id", "start_date_local", "name",
            _column_or_null(columns, "distance_m"),
            _column_or_null(columns, "moving_time_s"),
            "manual",
        ])

        cur = conn.cursor()
        if sport_types:
            marks = ",".join("?" for _ in sport_types)
            cur.execute(f"""
                SELECT {select}
                FROM activities
                WHERE sport_type IN ({marks})
                ORDER BY start_date_local DESC
                LIMIT ?;
            """, (*sport_types, limit))
        else:
            cur.execute(f"""
                SELECT {select}
                FROM activities
                ORDER BY start_date_local DESC
                LIMIT ?;
            """, (limit,))
        rows = cur.fetchall()
    finally:
        conn.close()

    sessions = []
    for (activity_id, start_date_local, name, distance_m, moving_time_s, manual) in rows:
        s = build_session(
            session_id=activity_id,
            completed_at=start_date_local,
            title=name,
            distance_m=distance_m,
            duration_s=moving_time_s,
            # activité manuelle => pas de laps côté montre
            telemetry_ref=None if manual else activity_id,
        )
        if s is not None:
            sessions.append(s)

    logger.info("SQLite %s: %d séances", db_path, len(sessions))
    return sessions


def fetch_laps(db_path: str, activity_id: int) -> List[Lap]:
    conn = connect_readonly(db_path)
    try:
        if not table_exists(conn, "laps_st"):
            return []
        cur = conn.cursor()
        cur.execute("""
            SELECT name, elapsed_time_s, moving_time_s, distance_m,
                   average_heartrate_bpm, max_heartrate_bpm
            FROM laps_st
            WHERE activity_id = ?
            ORDER BY lap_index ASC;
        """, (int(activity_id),))
        rows = cur.fetchall()
    finally:
        conn.close()

    return [
        Lap(
            distance_m=float(dist_m or 0.0),
            elapsed_time_s=int(elapsed_s or 0),
            moving_time_s=int(moving_s or 0),
            average_heartrate=avg_hr,
            max_heartrate=max_hr,
            name=name,
        )
        for (name, elapsed_s, moving_s, dist_m, avg_hr, max_hr) in rows
    ]


def make_lap_source(db_path: str = DB_PATH) -> Callable[[int], List[Lap]]:
    return partial(fetch_laps, db_path)


def make_history_source(db_path: str = DB_PATH,
                        limit: int = 50,
                        sport_types: Optional[Sequence[str]] = None) -> Callable[[], List[CompletedSession]]:
    return partial(fetch_sessions, db_path, limit, sport_types)
