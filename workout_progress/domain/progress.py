from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession


@dataclass(frozen=True)
class WorkoutTypeGroup:
    key: str
    count: int
    sessions: Tuple[CompletedSession, ...]  # plus récente d'abord


@dataclass(frozen=True)
class LapComparison:
    lap_diffs: Tuple[float, ...]  # pace courante - pace précédente (s/km), négatif = mieux
    improved: int
    worsened: int
    unchanged: int
    total_delta: float

    @property
    def total(self) -> int:
        return len(self.lap_diffs)


@dataclass(frozen=True)
class TrendPoint:
    date_label: str
    pace_s_per_km: float
    distance_km: float


@dataclass(frozen=True)
class SessionLaps:
    session: CompletedSession
    laps: Tuple[Lap, ...]
    avg_pace: float = 0.0


class ComparisonStatus(str, Enum):
    COMPARED = "COMPARED"
    NO_HISTORY = "NO_HISTORY"
    FIRST_TIME = "FIRST_TIME"
    NO_TELEMETRY = "NO_TELEMETRY"


EMPTY_STATE_MESSAGES = {
    ComparisonStatus.NO_HISTORY: "need at least 2 similar sessions",
    ComparisonStatus.FIRST_TIME: "first time doing this workout",
    ComparisonStatus.NO_TELEMETRY: "no lap data found for this session",
}


@dataclass(frozen=True)
class ProgressSnapshot:
    type_key: Optional[str]
    status: ComparisonStatus
    current: Optional[SessionLaps] = None
    previous: Optional[SessionLaps] = None
    comparison: Optional[LapComparison] = None
    insight: str = ""
    trend: List[TrendPoint] = field(default_factory=list)

    @property
    def empty_state(self) -> Optional[str]:
        return EMPTY_STATE_MESSAGES.get(self.status)
