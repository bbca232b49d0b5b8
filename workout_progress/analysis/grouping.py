import logging
import re
from typing import Callable, Dict, Iterable, List, Optional

from workout_progress.domain.progress import WorkoutTypeGroup
from workout_progress.domain.session import CompletedSession

logger = logging.getLogger(__name__)

MIN_GROUP_SIZE = 2
FALLBACK_KEY_LENGTH = 30
GENERIC_RUN_KEY = "rodaje"

# "Carrera de tarde", "Rodaje por la mañana"... ne doivent pas fragmenter les groupes
_TIME_OF_DAY_DE_RE = re.compile(r"\s+de\s+(?:tarde|mañana|noche|por la mañana)")
_TIME_OF_DAY_POR_RE = re.compile(r"\s+por\s+la\s+(?:tarde|mañana|noche)")

# 3x10' / 2x10' lt2 / 6x3' r90" / 10x400 r60
_SERIES_RE = re.compile(r"(\d+x\d+['\"]?\s*(?:lt\d*|r\d*['\"]?)*)", re.IGNORECASE)
_DISTANCE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*k(?:m)?", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

_QUOTE_TRANSLATION = str.maketrans({"’": "'", "‘": "'", "´": "'", "”": '"', "“": '"'})

Matcher = Callable[[str], Optional[str]]


def normalize_text(title: str) -> str:
    text = title.lower().translate(_QUOTE_TRANSLATION)
    text = _TIME_OF_DAY_DE_RE.sub("", text)
    text = _TIME_OF_DAY_POR_RE.sub("", text)
    return text.strip()


# -----------------------
# Matchers (ordre = priorité)
# -----------------------
def match_series(text: str) -> Optional[str]:
    m = _SERIES_RE.search(text)
    if not m:
        return None
    return _WHITESPACE_RE.sub(" ", m.group(1)).strip()


def match_distance(text: str) -> Optional[str]:
    m = _DISTANCE_RE.search(text)
    if not m:
        return None
    return f"{m.group(1)}km"


def match_generic_run(text: str) -> Optional[str]:
    if "carrera" in text:
        return GENERIC_RUN_KEY
    return None


def match_fallback(text: str) -> Optional[str]:
    return text[:FALLBACK_KEY_LENGTH]


MATCHERS: List[Matcher] = [
    match_series,
    match_distance,
    match_generic_run,
    match_fallback,
]


def normalize_title(title: str, matchers: Iterable[Matcher] = MATCHERS) -> str:
    text = normalize_text(title)
    for matcher in matchers:
        key = matcher(text)
        if key is not None:
            return key
    return text


def group_sessions(sessions: Iterable[CompletedSession],
                   min_size: int = MIN_GROUP_SIZE) -> List[WorkoutTypeGroup]:
    """
    Regroupe l'historique par type de séance.

    - séances sans titre exclues
    - chaque groupe trié du plus récent au plus ancien
    - seuls les groupes >= min_size sont retournés, du plus fréquent au moins fréquent
      (à égalité: ordre de première apparition)
    """
    by_key: Dict[str, List[CompletedSession]] = {}
    skipped = 0
    for s in sessions:
        if not s.title or not s.title.strip():
            skipped += 1
            continue
        by_key.setdefault(normalize_title(s.title), []).append(s)

    groups = [
        WorkoutTypeGroup(
            key=key,
            count=len(members),
            sessions=tuple(sorted(members, key=lambda s: s.completed_at, reverse=True)),
        )
        for key, members in by_key.items()
        if len(members) >= min_size
    ]
    groups.sort(key=lambda g: -g.count)

    logger.debug("Groupage: %d types (%d clés, %d séances sans titre)", len(groups), len(by_key), skipped)
    return groups


def find_group(groups: Iterable[WorkoutTypeGroup], key: Optional[str]) -> Optional[WorkoutTypeGroup]:
    for g in groups:
        if g.key == key:
            return g
    return None
