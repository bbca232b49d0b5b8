import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from workout_progress.analysis.compare import compare_sessions, session_laps
from workout_progress.analysis.grouping import find_group, group_sessions, normalize_title
from workout_progress.analysis.insight import generate_insight
from workout_progress.analysis.telemetry import LapSource, TelemetryAccessor
from workout_progress.analysis.trend import DEFAULT_TREND_LIMIT, build_trend
from workout_progress.domain.progress import ComparisonStatus, ProgressSnapshot, WorkoutTypeGroup
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

HistorySource = Callable[[], List[CompletedSession]]


class ProgressView:
    """
    Vue "Progreso" d'un athlète : types de séances comparables, comparaison
    lap par lap des deux dernières séances du type choisi, verdict et tendance.

    Rien n'est mis en cache hormis le dernier résultat publié ; chaque
    sélection recalcule tout à partir des entrées.
    """

    def __init__(self,
                 history_source: HistorySource,
                 lap_source: LapSource,
                 exclude_unknown_pace: bool = False,
                 trend_limit: int = DEFAULT_TREND_LIMIT,
                 executor: Optional[Executor] = None):
        self.history_source = history_source
        self.telemetry = TelemetryAccessor(lap_source)
        self.exclude_unknown_pace = exclude_unknown_pace
        self.trend_limit = trend_limit

        self._executor = executor
        self._groups: List[WorkoutTypeGroup] = []
        self._generation = 0
        self._lock = threading.Lock()
        self._current: Optional[ProgressSnapshot] = None

    # -----------------------
    # Historique / types
    # -----------------------
    def refresh(self) -> List[WorkoutTypeGroup]:
        sessions = self.history_source()
        self._groups = group_sessions(sessions)
        logger.info("%d séances, %d types comparables", len(sessions), len(self._groups))
        return self._groups

    @property
    def groups(self) -> List[WorkoutTypeGroup]:
        return list(self._groups)

    def workout_types(self) -> List[Tuple[str, int]]:
        return [(g.key, g.count) for g in self._groups]

    def default_type(self) -> Optional[str]:
        return self._groups[0].key if self._groups else None

    def resolve_type(self, text: str) -> str:
        """Accepte une clé existante ou un titre brut ("Series 3x10' de tarde")."""
        if find_group(self._groups, text) is not None:
            return text
        return normalize_title(text)

    # -----------------------
    # Sélection
    # -----------------------
    @property
    def current(self) -> Optional[ProgressSnapshot]:
        return self._current

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def _publish(self, token: int, snapshot: ProgressSnapshot) -> bool:
        with self._lock:
            if token != self._generation:
                logger.debug("Résultat obsolète ignoré (type=%s, génération %d < %d)",
                             snapshot.type_key, token, self._generation)
                return False
            self._current = snapshot
            return True

    def select(self, key: Optional[str]) -> ProgressSnapshot:
        token = self._next_generation()
        snapshot = self.compute(key)
        self._publish(token, snapshot)
        return snapshot

    def select_async(self, key: Optional[str]) -> "Future[ProgressSnapshot]":
        token = self._next_generation()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="progress")

        def run() -> ProgressSnapshot:
            snapshot = self.compute(key)
            self._publish(token, snapshot)
            return snapshot

        return self._executor.submit(run)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # -----------------------
    # Calcul (pur vis-à-vis de l'état de la vue)
    # -----------------------
    def compute(self, key: Optional[str]) -> ProgressSnapshot:
        group = find_group(self._groups, key)
        if group is None or not group.sessions:
            return ProgressSnapshot(type_key=key, status=ComparisonStatus.NO_HISTORY)

        current = group.sessions[0]
        previous = group.sessions[1] if len(group.sessions) > 1 else None

        current_laps, previous_laps = self.telemetry.fetch_pair(current, previous)

        cur = session_laps(current, current_laps, self.exclude_unknown_pace)
        prev = session_laps(previous, previous_laps, self.exclude_unknown_pace) if previous else None

        status, comparison = compare_sessions(cur, prev)

        return ProgressSnapshot(
            type_key=group.key,
            status=status,
            current=cur,
            previous=prev,
            comparison=comparison,
            insight=generate_insight(comparison),
            trend=build_trend(group.sessions, self.trend_limit),
        )
