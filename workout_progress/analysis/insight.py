from typing import Callable, List, Optional, Tuple

from workout_progress.domain.progress import LapComparison

EXCEPTIONAL = "exceptional session, nearly every lap improved."
SOLID_PROGRESS = "solid progress across most laps."
MODERATE = "moderate improvement; keep working on consistency."
SLOWER = "slower session; possible accumulated fatigue."
STRONG_FINISH = "strong finish; laps improved at the end"
STABLE = "stable performance; maintain consistency."

FINISH_WINDOW = 3

Rule = Tuple[Callable[[LapComparison], bool], str]


def _finished_strong(c: LapComparison) -> bool:
    last = c.lap_diffs[-FINISH_WINDOW:]
    return len(last) >= FINISH_WINDOW and all(d < 0 for d in last)


# évaluées dans l'ordre, la première qui matche gagne
RULES: List[Rule] = [
    (lambda c: c.improved >= c.total * 0.8, EXCEPTIONAL),
    (lambda c: c.improved >= c.total * 0.6, SOLID_PROGRESS),
    (lambda c: c.improved >= c.total * 0.4, MODERATE),
    (lambda c: c.worsened >= c.total * 0.6, SLOWER),
    (_finished_strong, STRONG_FINISH),
    (lambda c: True, STABLE),
]


def generate_insight(comparison: Optional[LapComparison]) -> str:
    if comparison is None or comparison.total == 0:
        return ""
    for predicate, message in RULES:
        if predicate(comparison):
            return message
    return STABLE
