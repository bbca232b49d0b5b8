import logging
import threading
from unittest.mock import MagicMock

from tests.session_helpers import laps_at_paces, make_session
from workout_progress.analysis.telemetry import TelemetryAccessor


def test_session_without_reference_has_no_laps():
    source = MagicMock()
    accessor = TelemetryAccessor(source)

    assert accessor.get_laps(make_session("a", "x", telemetry_ref=None)) == []
    assert accessor.get_laps(None) == []
    source.assert_not_called()


def test_source_failure_is_logged_not_raised(caplog):
    source = MagicMock(side_effect=RuntimeError("HTTP 500"))
    accessor = TelemetryAccessor(source)

    with caplog.at_level(logging.WARNING, logger="workout_progress.analysis.telemetry"):
        laps = accessor.get_laps(make_session("a", "x", telemetry_ref=42))

    assert laps == []
    source.assert_called_once_with(42)
    assert "HTTP 500" in caplog.text


def test_fetch_pair_failure_isolated():
    good = laps_at_paces([240, 241])

    def source(ref):
        if ref == 1:
            raise ConnectionError("timeout")
        return good

    accessor = TelemetryAccessor(source)
    current, previous = accessor.fetch_pair(
        make_session("cur", "x", days=1, telemetry_ref=1),
        make_session("prev", "x", days=0, telemetry_ref=2),
    )
    assert current == []
    assert previous == good


def test_fetch_pair_runs_both_fetches_concurrently():
    # chaque appel attend l'autre: ne passe que si les deux tournent en parallèle
    barrier = threading.Barrier(2, timeout=5)

    def source(ref):
        barrier.wait()
        return laps_at_paces([200 + ref])

    accessor = TelemetryAccessor(source)
    current, previous = accessor.fetch_pair(
        make_session("cur", "x", telemetry_ref=1),
        make_session("prev", "x", telemetry_ref=2),
    )
    assert current[0].elapsed_time_s == 201
    assert previous[0].elapsed_time_s == 202


def test_fetch_pair_without_previous():
    accessor = TelemetryAccessor(lambda ref: laps_at_paces([240]))
    current, previous = accessor.fetch_pair(make_session("cur", "x", telemetry_ref=1), None)
    assert len(current) == 1
    assert previous == []
