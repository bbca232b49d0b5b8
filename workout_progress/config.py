from dotenv import load_dotenv
load_dotenv()

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_DB_PATH = "running.db"
DEFAULT_TREND_LIMIT = 6
DEFAULT_HTTP_TIMEOUT_S = 20


class ConfigError(RuntimeError):
    pass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Variable {name} invalide (entier attendu): {raw!r}")


@dataclass
class Settings:
    strava_client_id: Optional[str] = None
    strava_client_secret: Optional[str] = None
    strava_refresh_token: Optional[str] = None
    strava_access_token: Optional[str] = None

    coach_api_url: Optional[str] = None
    coach_api_token: Optional[str] = None

    db_path: str = DEFAULT_DB_PATH
    trend_limit: int = DEFAULT_TREND_LIMIT
    exclude_unknown_pace: bool = False
    http_timeout_s: int = DEFAULT_HTTP_TIMEOUT_S
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            strava_client_id=os.getenv("STRAVA_CLIENT_ID"),
            strava_client_secret=os.getenv("STRAVA_CLIENT_SECRET"),
            strava_refresh_token=os.getenv("STRAVA_REFRESH_TOKEN"),
            strava_access_token=os.getenv("STRAVA_ACCESS_TOKEN"),
            coach_api_url=os.getenv("COACH_API_URL"),
            coach_api_token=os.getenv("COACH_API_TOKEN"),
            db_path=os.getenv("RUNNING_DB_PATH") or DEFAULT_DB_PATH,
            trend_limit=_env_int("PROGRESS_TREND_LIMIT", DEFAULT_TREND_LIMIT),
            exclude_unknown_pace=_env_bool("PROGRESS_EXCLUDE_UNKNOWN_PACE"),
            http_timeout_s=_env_int("HTTP_TIMEOUT_S", DEFAULT_HTTP_TIMEOUT_S),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )

    def require_strava(self) -> None:
        if not self.strava_access_token and not (
            self.strava_client_id and self.strava_client_secret and self.strava_refresh_token
        ):
            raise ConfigError(
                "Variables manquantes: STRAVA_ACCESS_TOKEN ou "
                "STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET, STRAVA_REFRESH_TOKEN"
            )

    def require_coach_api(self) -> None:
        if not self.coach_api_url or not self.coach_api_token:
            raise ConfigError("Variables manquantes: COACH_API_URL, COACH_API_TOKEN")
