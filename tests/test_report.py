import pytest

from tests.session_helpers import laps_at_paces, make_session
from workout_progress.analysis.compare import compare_laps, session_laps
from workout_progress.analysis.insight import generate_insight
from workout_progress.analysis.trend import build_trend
from workout_progress.dashboard.report import (
    fmt_delta,
    fmt_mmss,
    fmt_pace,
    is_mostly_improved,
    lap_rows,
    print_snapshot,
    print_types,
)
from workout_progress.domain.progress import ComparisonStatus, ProgressSnapshot


@pytest.mark.parametrize("pace,expected", [
    (None, "—"),
    (0.0, "—"),
    (245.4, "4:05/km"),
    (359.6, "6:00/km"),
])
def test_fmt_pace(pace, expected):
    assert fmt_pace(pace) == expected


def test_fmt_delta_and_time():
    assert fmt_delta(2.0) == "+2.0s"
    assert fmt_delta(-2.04) == "-2.0s"
    assert fmt_delta(0.0) == "0.0s"
    assert fmt_delta(None) == "—"
    assert fmt_mmss(605) == "10:05"


def compared_snapshot():
    cur_s = make_session("cur", "3x10'", days=7)
    prev_s = make_session("prev", "3x10'", days=0)
    cur = session_laps(cur_s, laps_at_paces([238, 240, 250]))
    prev = session_laps(prev_s, laps_at_paces([240, 240]))
    comparison = compare_laps(cur.laps, prev.laps)
    return ProgressSnapshot(
        type_key="3x10'",
        status=ComparisonStatus.COMPARED,
        current=cur,
        previous=prev,
        comparison=comparison,
        insight=generate_insight(comparison),
        trend=build_trend([cur_s, prev_s]),
    )


def test_lap_rows_cover_every_current_lap():
    rows = lap_rows(compared_snapshot())

    assert [r.index for r in rows] == [1, 2, 3]
    assert rows[0].status == "improved"
    assert rows[1].status == "unchanged"
    assert rows[2].delta is None and rows[2].status is None
    assert rows[2].pace == pytest.approx(250.0)


def test_lap_rows_without_current():
    assert lap_rows(ProgressSnapshot(type_key=None, status=ComparisonStatus.NO_HISTORY)) == []


def test_is_mostly_improved():
    assert is_mostly_improved(compared_snapshot())
    assert not is_mostly_improved(ProgressSnapshot(type_key=None, status=ComparisonStatus.NO_HISTORY))


def test_print_snapshot(capsys):
    print_types([("3x10'", 2)])
    print_snapshot(compared_snapshot())
    print_snapshot(ProgressSnapshot(type_key="x", status=ComparisonStatus.NO_HISTORY))

    out = capsys.readouterr().out
    assert "3x10'" in out
    assert "Lap  1" in out
    assert "moderate improvement; keep working on consistency." in out
    assert "need at least 2 similar sessions" in out
    assert "Tendance" in out
