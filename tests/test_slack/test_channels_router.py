"""Integration tests for the channel registration endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from incident_tracker.app import app
from incident_tracker.dependencies import get_store
from incident_tracker.errors import ChannelNotFoundError, DuplicateChannelError
from incident_tracker.models.fetch import Channel, ChannelUpdate

TEST_SECRET = "test_api_secret_1234"
AUTH = {"X-Api-Secret": TEST_SECRET}


def _channel(**overrides) -> Channel:
    fields = {"id": "ch-1", "slack_channel_id": "C0123ABCD", "name": "incidents"}
    fields.update(overrides)
    return Channel(**fields)


@pytest.fixture
def store() -> AsyncMock:
    store = AsyncMock()
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _settings():
    settings = MagicMock()
    settings.api_secret = TEST_SECRET
    with patch("incident_tracker.dependencies.get_settings", return_value=settings):
        yield


def test_list_channels(client, store):
    store.list_channels.return_value = [_channel(id="ch-2"), _channel()]

    response = client.get("/channels")

    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["ch-2", "ch-1"]


def test_create_channel(client, store):
    store.add_channel.return_value = _channel()

    response = client.post(
        "/channels",
        json={"slackChannelId": "C0123ABCD", "name": "incidents"},
        headers=AUTH,
    )

    assert response.status_code == 201
    assert response.json()["slack_channel_id"] == "C0123ABCD"
    store.add_channel.assert_awaited_once_with("C0123ABCD", "incidents", True)


def test_create_channel_requires_secret(client, store):
    response = client.post(
        "/channels", json={"slackChannelId": "C0123ABCD", "name": "incidents"}
    )

    assert response.status_code == 403
    store.add_channel.assert_not_awaited()


def test_duplicate_slack_channel_id_returns_400(client, store):
    store.add_channel.side_effect = DuplicateChannelError("C0123ABCD")

    response = client.post(
        "/channels",
        json={"slackChannelId": "C0123ABCD", "name": "incidents"},
        headers=AUTH,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Channel with this Slack ID already exists"


@pytest.mark.parametrize("slack_channel_id", ["c0123abcd", "D0123ABCD", "C", ""])
def test_malformed_slack_channel_id_is_rejected(client, store, slack_channel_id):
    response = client.post(
        "/channels",
        json={"slackChannelId": slack_channel_id, "name": "incidents"},
        headers=AUTH,
    )

    assert response.status_code == 422
    store.add_channel.assert_not_awaited()


def test_update_channel(client, store):
    store.update_channel.return_value = _channel(enabled=False)

    response = client.patch("/channels/ch-1", json={"enabled": False}, headers=AUTH)

    assert response.status_code == 200
    assert response.json()["enabled"] is False
    store.update_channel.assert_awaited_once_with("ch-1", ChannelUpdate(enabled=False))


def test_update_missing_channel_returns_404(client, store):
    store.update_channel.side_effect = ChannelNotFoundError("nope")

    response = client.patch("/channels/nope", json={"name": "x"}, headers=AUTH)

    assert response.status_code == 404
    assert response.json()["detail"] == "Channel not found"


def test_delete_channel(client, store):
    response = client.delete("/channels/ch-1", headers=AUTH)

    assert response.status_code == 204
    store.delete_channel.assert_awaited_once_with("ch-1")


def test_delete_missing_channel_returns_404(client, store):
    store.delete_channel.side_effect = ChannelNotFoundError("nope")

    response = client.delete("/channels/nope", headers=AUTH)

    assert response.status_code == 404


def test_delete_channel_requires_secret(client, store):
    response = client.delete("/channels/ch-1", headers={"X-Api-Secret": "wrong"})

    assert response.status_code == 403
    store.delete_channel.assert_not_awaited()
