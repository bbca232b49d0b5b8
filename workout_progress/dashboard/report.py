from dataclasses import dataclass
from typing import List, Optional

from workout_progress.analysis.compare import classify_delta
from workout_progress.analysis.pace import lap_pace
from workout_progress.analysis.trend import has_chart_data
from workout_progress.domain.progress import ComparisonStatus, ProgressSnapshot


# -----------------------
# Format helpers
# -----------------------
def fmt_pace(pace_s_per_km: Optional[float]) -> str:
    if pace_s_per_km is None or pace_s_per_km <= 0:
        return "—"
    total = int(round(pace_s_per_km))
    mm = total // 60
    ss = total % 60
    return f"{mm}:{ss:02d}/km"


def fmt_mmss(seconds: Optional[float]) -> str:
    if seconds is None:
        return "—"
    s = int(round(seconds))
    mm = s // 60
    ss = s % 60
    return f"{mm}:{ss:02d}"


def fmt_delta(diff: Optional[float]) -> str:
    if diff is None:
        return "—"
    sign = "+" if diff > 0 else ""
    return f"{sign}{diff:.1f}s"


# -----------------------
# Lignes par lap
# -----------------------
@dataclass(frozen=True)
class LapRow:
    index: int  # 1-based pour l'affichage
    distance_km: float
    elapsed_s: int
    pace: float
    delta: Optional[float]
    status: Optional[str]


def lap_rows(snapshot: ProgressSnapshot) -> List[LapRow]:
    if snapshot.current is None:
        return []

    diffs = snapshot.comparison.lap_diffs if snapshot.comparison else ()
    rows = []
    for i, lap in enumerate(snapshot.current.laps):
        delta = diffs[i] if i < len(diffs) else None
        rows.append(LapRow(
            index=i + 1,
            distance_km=lap.distance_m / 1000.0,
            elapsed_s=lap.elapsed_time_s,
            pace=lap_pace(lap),
            delta=delta,
            status=classify_delta(delta) if delta is not None else None,
        ))
    return rows


def is_mostly_improved(snapshot: ProgressSnapshot) -> bool:
    c = snapshot.comparison
    return c is not None and c.total > 0 and c.improved >= c.total * 0.5


# -----------------------
# Printing
# -----------------------
STATUS_MARK = {"improved": "▲", "worsened": "▼", "unchanged": "="}


def print_types(types: List[tuple]) -> None:
    print("\nTypes de séances comparables:")
    if not types:
        print("  (aucun)")
        return
    for (key, count) in types:
        print(f"  {key:<30} {count} séances")


def print_snapshot(snapshot: ProgressSnapshot) -> None:
    print("\n" + "=" * 72)
    print(f"PROGRESSION | type: {snapshot.type_key or '—'}")
    print("=" * 72)

    if snapshot.status == ComparisonStatus.NO_HISTORY:
        print(f"  {snapshot.empty_state}")
        print("=" * 72)
        return

    cur = snapshot.current
    prev = snapshot.previous
    print(f"Actuelle : {cur.session.completed_at:%Y-%m-%d} | {cur.session.title} | "
          f"{len(cur.laps)} laps | moy {fmt_pace(cur.avg_pace)}")
    if prev is not None:
        print(f"Précédente: {prev.session.completed_at:%Y-%m-%d} | {prev.session.title} | "
              f"{len(prev.laps)} laps | moy {fmt_pace(prev.avg_pace)}")
    print("-" * 72)

    if snapshot.status != ComparisonStatus.COMPARED:
        print(f"  {snapshot.empty_state}")
    else:
        for row in lap_rows(snapshot):
            mark = STATUS_MARK.get(row.status, " ")
            print(f"  Lap {row.index:>2} | {row.distance_km:.2f}km | {fmt_mmss(row.elapsed_s)} | "
                  f"{fmt_pace(row.pace)} | {mark} {fmt_delta(row.delta)}")

        c = snapshot.comparison
        print("-" * 72)
        print(f"  Laps améliorés {c.improved}/{c.total} | dégradés {c.worsened} | stables {c.unchanged}")
        print(f"  {fmt_delta(c.total_delta)} total cumulé")
        print(f"  Verdict: {snapshot.insight}")

    if has_chart_data(snapshot.trend):
        print("-" * 72)
        print("Tendance:")
        for p in snapshot.trend:
            print(f"  {p.date_label:<8} | {fmt_pace(p.pace_s_per_km):>9} | {p.distance_km:.2f} km")

    print("=" * 72)
    print("")
