from typing import List, Sequence

from workout_progress.domain.progress import TrendPoint
from workout_progress.domain.session import CompletedSession

DEFAULT_TREND_LIMIT = 6

# abréviations es-ES (produit hispanophone)
SHORT_MONTHS = ["ene", "feb", "mar", "abr", "may", "jun",
                "jul", "ago", "sept", "oct", "nov", "dic"]


def date_label(session: CompletedSession) -> str:
    d = session.completed_at
    return f"{d.day} {SHORT_MONTHS[d.month - 1]}"


def session_pace(session: CompletedSession) -> float:
    if not session.duration_s or not session.distance_m:
        return 0.0
    return session.duration_s / (session.distance_m / 1000.0)


def build_trend(sessions: Sequence[CompletedSession], limit: int = DEFAULT_TREND_LIMIT) -> List[TrendPoint]:
    """
    sessions: plus récente d'abord (ordre d'un WorkoutTypeGroup).
    Retour: les `limit` plus récentes, de la plus ancienne à la plus récente.
    """
    recent = list(sessions[:limit])
    recent.reverse()
    return [
        TrendPoint(
            date_label=date_label(s),
            pace_s_per_km=session_pace(s),
            distance_km=(s.distance_m / 1000.0) if s.distance_m else 0.0,
        )
        for s in recent
    ]


def has_chart_data(points: Sequence[TrendPoint]) -> bool:
    return len(points) >= 2 and any(p.pace_s_per_km > 0 for p in points)
