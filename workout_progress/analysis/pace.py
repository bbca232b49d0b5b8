from typing import Optional, Sequence

from workout_progress.domain.lap import Lap

# 0 = pace inconnue (distance ou temps absent), jamais "pace instantanée"
UNKNOWN_PACE = 0.0


def pace_from_time_distance(elapsed_s: Optional[float], dist_m: Optional[float]) -> float:
    if not dist_m or not elapsed_s or dist_m <= 0:
        return UNKNOWN_PACE
    return (elapsed_s / dist_m) * 1000.0


def lap_pace(lap: Lap) -> float:
    """Pace du lap en s/km, basée sur le temps écoulé (pauses comprises)."""
    return pace_from_time_distance(lap.elapsed_time_s, lap.distance_m)


def average_pace(laps: Sequence[Lap], exclude_unknown: bool = False) -> float:
    """
    Moyenne simple des paces de laps (non pondérée par la distance).

    Par défaut les laps sans distance comptent pour 0 et tirent la moyenne
    vers le bas ; exclude_unknown=True les écarte.
    """
    paces = [lap_pace(lap) for lap in laps]
    if exclude_unknown:
        paces = [p for p in paces if p != UNKNOWN_PACE]
    if not paces:
        return UNKNOWN_PACE
    return sum(paces) / len(paces)
