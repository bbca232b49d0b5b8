import logging
from typing import Optional, Sequence, Tuple

from workout_progress.analysis.pace import average_pace, lap_pace
from workout_progress.domain.lap import Lap
from workout_progress.domain.progress import ComparisonStatus, LapComparison, SessionLaps
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

# bande de bruit GPS (s/km)
NOISE_BAND_S_PER_KM = 0.5

IMPROVED = "improved"
WORSENED = "worsened"
UNCHANGED = "unchanged"


def classify_delta(delta: float) -> str:
    if delta < -NOISE_BAND_S_PER_KM:
        return IMPROVED
    if delta > NOISE_BAND_S_PER_KM:
        return WORSENED
    return UNCHANGED


def compare_laps(current: Sequence[Lap], previous: Sequence[Lap]) -> Optional[LapComparison]:
    """
    Lap i courant vs lap i précédent, sur la longueur la plus courte.
    None si l'une des deux séances n'a pas de laps.
    """
    if not current or not previous:
        return None

    n = min(len(current), len(previous))
    diffs = tuple(lap_pace(current[i]) - lap_pace(previous[i]) for i in range(n))

    labels = [classify_delta(d) for d in diffs]
    improved = labels.count(IMPROVED)
    worsened = labels.count(WORSENED)

    return LapComparison(
        lap_diffs=diffs,
        improved=improved,
        worsened=worsened,
        unchanged=n - improved - worsened,
        total_delta=sum(diffs),
    )


def session_laps(session: CompletedSession,
                 laps: Sequence[Lap],
                 exclude_unknown_pace: bool = False) -> SessionLaps:
    return SessionLaps(
        session=session,
        laps=tuple(laps),
        avg_pace=average_pace(laps, exclude_unknown=exclude_unknown_pace),
    )


def compare_sessions(current: SessionLaps,
                     previous: Optional[SessionLaps]) -> Tuple[ComparisonStatus, Optional[LapComparison]]:
    if previous is None:
        return ComparisonStatus.FIRST_TIME, None

    comparison = compare_laps(current.laps, previous.laps)
    if comparison is None:
        logger.info("Comparaison impossible %s vs %s: laps courant=%d précédent=%d",
                    current.session.id, previous.session.id,
                    len(current.laps), len(previous.laps))
        return ComparisonStatus.NO_TELEMETRY, None

    return ComparisonStatus.COMPARED, comparison
