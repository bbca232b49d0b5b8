from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Lap:
    # l'index du lap = sa position dans la séquence

    # --- Données temporelles ---
    distance_m: float = 0.0
    elapsed_time_s: int = 0
    moving_time_s: int = 0

    # --- Cardio ---
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None

    name: Optional[str] = None
