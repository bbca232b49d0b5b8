import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """
    Strava / API: '2025-12-26T16:30:15Z' ou '2025-12-26T16:30:15.000Z'.
    Sans offset (lignes SQLite), l'heure est prise comme UTC : toutes les dates
    renvoyées sont "aware" et donc comparables entre elles.
    """
    if isinstance(value, datetime):
        return _as_aware(value)
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _as_aware(datetime.fromisoformat(text))
    except ValueError:
        return None


def _as_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int(value: Any) -> Optional[int]:
    f = to_float(value)
    if f is None:
        return None
    return int(f)


def parse_lap(raw: Dict[str, Any]) -> Lap:
    return Lap(
        distance_m=to_float(raw.get("distance")) or 0.0,
        elapsed_time_s=to_int(raw.get("elapsed_time")) or 0,
        moving_time_s=to_int(raw.get("moving_time")) or 0,
        average_heartrate=to_float(raw.get("average_heartrate")),
        max_heartrate=to_float(raw.get("max_heartrate")),
        name=raw.get("name"),
    )


def parse_laps(payload: Any) -> List[Lap]:
    if not isinstance(payload, list):
        raise ValueError(f"Laps attendus sous forme de liste, reçu: {type(payload).__name__}")
    return [parse_lap(lap) for lap in payload if isinstance(lap, dict)]


def build_session(session_id: Any,
                  completed_at: Any,
                  title: Optional[str],
                  distance_m: Any,
                  duration_s: Any,
                  telemetry_ref: Any) -> Optional[CompletedSession]:
    dt = parse_iso_datetime(completed_at)
    if session_id is None or dt is None:
        logger.warning("Séance ignorée (id ou date manquant): id=%r date=%r", session_id, completed_at)
        return None

    return CompletedSession(
        id=str(session_id),
        completed_at=dt,
        title=title or None,
        distance_m=to_float(distance_m),
        duration_s=to_int(duration_s),
        telemetry_ref=to_int(telemetry_ref),
    )
