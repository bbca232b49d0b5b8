import logging
import threading
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from workout_progress.adapters.parsing import build_session, parse_laps
from workout_progress.config import Settings
from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

STRAVA_TOKEN_URL = "https://www.strava.com/oauth/token"
STRAVA_API_BASE = "https://www.strava.com/api/v3"
STRAVA_ACTIVITIES_URL = f"{STRAVA_API_BASE}/athlete/activities"
STRAVA_LAPS_URL = f"{STRAVA_API_BASE}/activities/{{activity_id}}/laps"

# Settings est partagé entre les threads de fetch_pair
_token_lock = threading.Lock()


class StravaError(RuntimeError):
    pass


# -----------------------
# OAuth + HTTP
# -----------------------
def refresh_access_token(settings: Settings) -> str:
    if not settings.strava_client_id or not settings.strava_client_secret or not settings.strava_refresh_token:
        raise StravaError(
            "Variables manquantes: STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET, STRAVA_REFRESH_TOKEN"
        )

    body = {
        "client_id": settings.strava_client_id,
        "client_secret": settings.strava_client_secret,
        "grant_type": "refresh_token",
        "refresh_token": settings.strava_refresh_token,
    }

    r = requests.post(STRAVA_TOKEN_URL, data=body, timeout=settings.http_timeout_s)
    data = _json_or_raise(r, "refresh token")
    if not isinstance(data, dict):
        raise StravaError(f"Réponse refresh token invalide: {data}")

    new_access = data.get("access_token")
    new_refresh = data.get("refresh_token")

    if not new_access:
        raise StravaError(f"Refresh sans access_token: {data}")

    settings.strava_access_token = new_access
    if new_refresh:
        settings.strava_refresh_token = new_refresh

    logger.info("Token Strava rafraîchi")
    return new_access


def _refresh_if_stale(settings: Settings, stale_token: Optional[str]) -> str:
    """
    Un seul refresh même si plusieurs threads reçoivent un 401 avec le même token.
    """
    with _token_lock:
        current = settings.strava_access_token
        if current and current != stale_token:
            return current
        return refresh_access_token(settings)


def _get_access_token_or_refresh(settings: Settings) -> str:
    if settings.strava_access_token:
        return settings.strava_access_token
    return _refresh_if_stale(settings, None)


def _strava_get(settings: Settings, url: str, params: Optional[dict] = None) -> requests.Response:
    token = _get_access_token_or_refresh(settings)
    headers = {"Authorization": f"Bearer {token}"}

    try:
        r = requests.get(url, headers=headers, params=params, timeout=settings.http_timeout_s)
    except requests.exceptions.RequestException as e:
        logger.warning("Strava GET %s en échec (%s), nouvel essai", url, e)
        time.sleep(2)
        r = requests.get(url, headers=headers, params=params, timeout=settings.http_timeout_s)

    if r.status_code == 401:
        try:
            payload = r.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("message") == "Authorization Error":
            token = _refresh_if_stale(settings, token)
            headers = {"Authorization": f"Bearer {token}"}
            r = requests.get(url, headers=headers, params=params, timeout=settings.http_timeout_s)

    return r


def _json_or_raise(r: requests.Response, what: str) -> Any:
    if r.status_code != 200:
        try:
            data = r.json()
        except ValueError:
            data = r.text
        raise StravaError(f"Erreur Strava {what} (HTTP {r.status_code}): {data}")
    try:
        return r.json()
    except ValueError:
        raise StravaError(f"Réponse Strava {what} non JSON")


# -----------------------
# Laps (télémétrie)
# -----------------------
def fetch_activity_laps(settings: Settings, activity_id: int) -> List[Lap]:
    r = _strava_get(settings, STRAVA_LAPS_URL.format(activity_id=activity_id))
    laps = parse_laps(_json_or_raise(r, "laps"))
    logger.debug("Strava activity %s: %d laps", activity_id, len(laps))
    return laps


# -----------------------
# Historique des séances
# -----------------------
def session_from_activity(a: Dict[str, Any]) -> Optional[CompletedSession]:
    return build_session(
        session_id=a.get("id"),
        completed_at=a.get("start_date_local") or a.get("start_date"),
        title=a.get("name"),
        distance_m=a.get("distance"),
        duration_s=a.get("moving_time"),
        telemetry_ref=a.get("id"),
    )


def fetch_recent_sessions(settings: Settings,
                          per_page: int = 50,
                          sport_types: Optional[Sequence[str]] = None) -> List[CompletedSession]:
    r = _strava_get(settings, STRAVA_ACTIVITIES_URL, params={"per_page": per_page, "page": 1})
    activities = _json_or_raise(r, "activities")

    sessions = []
    for a in activities:
        if sport_types and a.get("sport_type", a.get("type")) not in sport_types:
            continue
        s = session_from_activity(a)
        if s is not None:
            sessions.append(s)

    logger.info("Strava: %d séances récupérées", len(sessions))
    return sessions


def make_lap_source(settings: Settings) -> Callable[[int], List[Lap]]:
    return partial(fetch_activity_laps, settings)


def make_history_source(settings: Settings,
                        per_page: int = 50,
                        sport_types: Optional[Sequence[str]] = None) -> Callable[[], List[CompletedSession]]:
    return partial(fetch_recent_sessions, settings, per_page, sport_types)
