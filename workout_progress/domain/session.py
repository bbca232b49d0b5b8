from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class CompletedSession:
    # --- Identité ---
    id: str
    completed_at: datetime

    # --- Saisie athlète ---
    title: Optional[str] = None

    # --- Totaux (niveau séance) ---
    distance_m: Optional[float] = None
    duration_s: Optional[int] = None

    # --- Lien télémétrie (ex: activity_id Strava) ---
    telemetry_ref: Optional[int] = None
