from datetime import datetime

import pytest

from tests.session_helpers import make_session
from workout_progress.analysis.grouping import group_sessions
from workout_progress.analysis.trend import build_trend, date_label, has_chart_data, session_pace
from workout_progress.domain.progress import TrendPoint
from workout_progress.domain.session import CompletedSession


def test_trend_keeps_six_most_recent_oldest_first():
    sessions = [make_session(str(i), "Rodaje 10km", days=i, duration_s=3000 - i * 10) for i in range(8)]
    group = group_sessions(sessions)[0]

    points = build_trend(group.sessions)

    assert len(points) == 6
    # jours 2..7, du plus ancien au plus récent (BASE_DATE = 1 mars)
    assert [p.date_label for p in points] == ["3 mar", "4 mar", "5 mar", "6 mar", "7 mar", "8 mar"]
    assert points[-1].pace_s_per_km == pytest.approx(293.0)


def test_trend_with_fewer_sessions():
    group = group_sessions([make_session("a", "5k", days=0), make_session("b", "5k", days=1)])[0]
    assert len(build_trend(group.sessions)) == 2
    assert len(build_trend(group.sessions, limit=1)) == 1


def test_point_values():
    s = make_session("a", "x", distance_m=8000.0, duration_s=2400)
    assert session_pace(s) == pytest.approx(300.0)
    assert build_trend([s])[0] == TrendPoint(date_label="1 mar", pace_s_per_km=300.0, distance_km=8.0)


@pytest.mark.parametrize("distance,duration", [(None, 2400), (8000.0, None), (0.0, 2400)])
def test_missing_totals_give_zero(distance, duration):
    s = make_session("a", "x", distance_m=distance, duration_s=duration)
    point = build_trend([s])[0]
    assert point.pace_s_per_km == 0.0
    if not distance:
        assert point.distance_km == 0.0


def test_date_label_short_month():
    s = CompletedSession(id="1", completed_at=datetime(2025, 9, 5, 7, 30))
    assert date_label(s) == "5 sept"
    s = CompletedSession(id="2", completed_at=datetime(2025, 1, 31))
    assert date_label(s) == "31 ene"


def test_has_chart_data():
    p0 = TrendPoint("1 mar", 0.0, 0.0)
    p1 = TrendPoint("2 mar", 290.0, 10.0)
    assert not has_chart_data([p1])
    assert not has_chart_data([p0, p0])
    assert has_chart_data([p0, p1])
