"""Integration tests for the /slack/fetch endpoint."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from incident_tracker.app import app
from incident_tracker.dependencies import get_fetcher
from incident_tracker.models.fetch import FetchResult, FetchStatus

TEST_SECRET = "test_api_secret_1234"

VALID_BODY = {
    "channelId": "chan-1",
    "startDate": "2024-01-01T00:00:00Z",
    "endDate": "2024-01-31T23:59:59Z",
}


def _mock_settings(secret: str = TEST_SECRET) -> MagicMock:
    settings = MagicMock()
    settings.api_secret = secret
    return settings


@pytest.fixture
def fetcher() -> AsyncMock:
    fetcher = AsyncMock()
    fetcher.fetch_channel_messages.return_value = FetchResult(
        fetched_count=150, status=FetchStatus.COMPLETED
    )
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    yield fetcher
    app.dependency_overrides.clear()


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_returns_camel_case_result(mock_get_settings, client, fetcher):
    """Successful fetch returns fetchedCount and status, no error key."""
    mock_get_settings.return_value = _mock_settings()

    response = client.post(
        "/slack/fetch", json=VALID_BODY, headers={"X-Api-Secret": TEST_SECRET}
    )

    assert response.status_code == 200
    assert response.json() == {"fetchedCount": 150, "status": "completed"}
    request = fetcher.fetch_channel_messages.await_args.args[0]
    assert request.channel_id == "chan-1"
    assert request.start_date.year == 2024


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_failure_is_reported_in_body(mock_get_settings, client, fetcher):
    mock_get_settings.return_value = _mock_settings()
    fetcher.fetch_channel_messages.return_value = FetchResult(
        fetched_count=0, status=FetchStatus.FAILED, error="Channel not found"
    )

    response = client.post(
        "/slack/fetch", json=VALID_BODY, headers={"X-Api-Secret": TEST_SECRET}
    )

    assert response.status_code == 200
    assert response.json() == {
        "fetchedCount": 0,
        "status": "failed",
        "error": "Channel not found",
    }


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_rejects_missing_secret(mock_get_settings, client, fetcher):
    mock_get_settings.return_value = _mock_settings()

    response = client.post("/slack/fetch", json=VALID_BODY)

    assert response.status_code == 403
    fetcher.fetch_channel_messages.assert_not_awaited()


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_rejects_wrong_secret(mock_get_settings, client, fetcher):
    mock_get_settings.return_value = _mock_settings()

    response = client.post(
        "/slack/fetch", json=VALID_BODY, headers={"X-Api-Secret": "wrong"}
    )

    assert response.status_code == 403


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_rejects_when_no_secret_configured(mock_get_settings, client, fetcher):
    """An unconfigured secret locks the endpoint rather than opening it."""
    mock_get_settings.return_value = _mock_settings(secret="")

    response = client.post("/slack/fetch", json=VALID_BODY, headers={"X-Api-Secret": ""})

    assert response.status_code == 403


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_validates_body(mock_get_settings, client, fetcher):
    mock_get_settings.return_value = _mock_settings()

    response = client.post(
        "/slack/fetch",
        json={"channelId": "chan-1"},
        headers={"X-Api-Secret": TEST_SECRET},
    )

    assert response.status_code == 422
    fetcher.fetch_channel_messages.assert_not_awaited()


@patch("incident_tracker.dependencies.get_settings")
def test_fetch_rejects_inverted_range(mock_get_settings, client, fetcher):
    mock_get_settings.return_value = _mock_settings()
    body = {**VALID_BODY, "startDate": "2024-02-01T00:00:00Z"}

    response = client.post("/slack/fetch", json=body, headers={"X-Api-Secret": TEST_SECRET})

    assert response.status_code == 422
