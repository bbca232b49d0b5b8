import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional

import requests

from workout_progress.adapters.parsing import build_session, parse_laps
from workout_progress.config import Settings
from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)


class CoachApiError(RuntimeError):
    pass


def _api_get(settings: Settings, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    settings.require_coach_api()
    url = settings.coach_api_url.rstrip("/") + path
    headers = {"Authorization": f"Bearer {settings.coach_api_token}"}

    try:
        r = requests.get(url, headers=headers, params=params, timeout=settings.http_timeout_s)
    except requests.exceptions.RequestException as e:
        raise CoachApiError(f"API injoignable ({url}): {e}")

    if r.status_code != 200:
        try:
            data = r.json()
        except ValueError:
            data = r.text
        raise CoachApiError(f"Erreur API {r.status_code} sur {path}: {data}")

    try:
        return r.json()
    except ValueError:
        raise CoachApiError(f"Réponse non JSON sur {path}")


def session_from_completed_workout(w: Dict[str, Any]) -> Optional[CompletedSession]:
    return build_session(
        session_id=w.get("id"),
        completed_at=w.get("completedAt"),
        title=w.get("title"),
        distance_m=w.get("actualDistance"),
        duration_s=w.get("actualDuration"),
        telemetry_ref=w.get("stravaId"),
    )


def fetch_recent_completed(settings: Settings) -> List[CompletedSession]:
    """
    Historique récent de l'athlète connecté (fenêtre décidée côté serveur).
    """
    data = _api_get(settings, "/stats/dashboard")
    if not isinstance(data, dict):
        raise CoachApiError("Réponse dashboard invalide")
    raw = data.get("recentCompleted") or []

    sessions = []
    for w in raw:
        s = session_from_completed_workout(w)
        if s is not None:
            sessions.append(s)

    logger.info("API: %d séances récupérées", len(sessions))
    return sessions


def fetch_activity_laps(settings: Settings, activity_id: int) -> List[Lap]:
    data = _api_get(settings, f"/strava/activities/{int(activity_id)}/laps")
    if not isinstance(data, dict):
        raise CoachApiError("Réponse laps invalide")
    return parse_laps(data.get("laps") or [])


def make_lap_source(settings: Settings) -> Callable[[int], List[Lap]]:
    return partial(fetch_activity_laps, settings)


def make_history_source(settings: Settings) -> Callable[[], List[CompletedSession]]:
    return partial(fetch_recent_completed, settings)
