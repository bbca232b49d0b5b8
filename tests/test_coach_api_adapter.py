from unittest.mock import MagicMock, patch

import pytest
import requests

from workout_progress.adapters import coach_api
from workout_progress.adapters.coach_api import CoachApiError
from workout_progress.config import ConfigError, Settings


def response(status=200, payload=None):
    r = MagicMock()
    r.status_code = status
    r.json.return_value = payload
    r.text = str(payload)
    return r


@pytest.fixture
def settings():
    return Settings(coach_api_url="https://coach.example.com/api/", coach_api_token="jwt")


@patch("workout_progress.adapters.coach_api.requests.get")
def test_fetch_recent_completed(mock_get, settings):
    mock_get.return_value = response(200, {
        "stats": {},
        "recentCompleted": [
            {"id": "cw1", "title": "Rodaje 10km", "completedAt": "2025-03-02T07:00:00.000Z",
             "actualDistance": 10012.3, "actualDuration": 3010, "stravaId": "13579"},
            {"id": "cw2", "completedAt": "2025-03-01T07:00:00.000Z"},
            {"title": "sin id", "completedAt": "2025-03-01T07:00:00.000Z"},
        ],
    })

    sessions = coach_api.fetch_recent_completed(settings)

    assert [s.id for s in sessions] == ["cw1", "cw2"]
    assert sessions[0].telemetry_ref == 13579
    assert sessions[0].duration_s == 3010
    assert sessions[1].title is None
    assert sessions[1].telemetry_ref is None
    assert mock_get.call_args[0][0] == "https://coach.example.com/api/stats/dashboard"
    assert mock_get.call_args[1]["headers"] == {"Authorization": "Bearer jwt"}


@patch("workout_progress.adapters.coach_api.requests.get")
def test_fetch_activity_laps(mock_get, settings):
    mock_get.return_value = response(200, {"laps": [
        {"elapsed_time": 300, "moving_time": 295, "distance": 1000.0, "average_heartrate": 140},
    ]})

    laps = coach_api.fetch_activity_laps(settings, 13579)

    assert len(laps) == 1
    assert laps[0].elapsed_time_s == 300
    assert mock_get.call_args[0][0].endswith("/strava/activities/13579/laps")


@patch("workout_progress.adapters.coach_api.requests.get")
def test_errors_raise_coach_api_error(mock_get, settings):
    mock_get.return_value = response(500, {"error": "Failed to fetch activity laps"})
    with pytest.raises(CoachApiError):
        coach_api.fetch_activity_laps(settings, 1)

    mock_get.side_effect = requests.exceptions.Timeout("slow")
    with pytest.raises(CoachApiError):
        coach_api.fetch_recent_completed(settings)


def test_missing_configuration():
    with pytest.raises(ConfigError):
        coach_api.fetch_recent_completed(Settings())
