import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from workout_progress.domain.lap import Lap
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

LapSource = Callable[[int], List[Lap]]


class TelemetryAccessor:
    """
    Accès aux laps d'une séance via une source externe (Strava, API, SQLite).

    Ne lève jamais : séance sans référence ou source en échec => [].
    """

    def __init__(self, lap_source: LapSource, executor: Optional[Executor] = None):
        self.lap_source = lap_source
        self._executor = executor

    def get_laps(self, session: Optional[CompletedSession]) -> List[Lap]:
        if session is None:
            return []
        if session.telemetry_ref is None:
            logger.info("Séance %s sans référence télémétrie", session.id)
            return []
        try:
            laps = self.lap_source(session.telemetry_ref)
        except Exception as e:
            logger.warning("Laps indisponibles pour la séance %s (ref=%s): %s",
                           session.id, session.telemetry_ref, e)
            return []
        return list(laps or [])

    def fetch_pair(self,
                   current: Optional[CompletedSession],
                   previous: Optional[CompletedSession]) -> Tuple[List[Lap], List[Lap]]:
        """
        Les deux appels partent en parallèle ; l'échec de l'un ne bloque pas l'autre.
        """
        if self._executor is not None:
            return self._fetch_both(self._executor, current, previous)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="laps") as pool:
            return self._fetch_both(pool, current, previous)

    def _fetch_both(self, pool: Executor, current, previous) -> Tuple[List[Lap], List[Lap]]:
        f_cur = pool.submit(self.get_laps, current)
        f_prev = pool.submit(self.get_laps, previous)
        return f_cur.result(), f_prev.result()
