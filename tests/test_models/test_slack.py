"""Tests for the Slack response model and message accessors."""

from datetime import datetime, timezone

from incident_tracker.models.slack import (
    SlackApiResponse,
    has_replies,
    message_text,
    message_ts,
    reply_count,
    thread_ts,
    ts_to_datetime,
)


def test_response_defaults():
    response = SlackApiResponse(ok=True)
    assert response.messages == []
    assert response.error is None
    assert response.next_cursor is None


def test_response_next_cursor():
    response = SlackApiResponse(ok=True, response_metadata={"next_cursor": "abc"})
    assert response.next_cursor == "abc"


def test_empty_cursor_is_none():
    response = SlackApiResponse(ok=True, response_metadata={"next_cursor": ""})
    assert response.next_cursor is None


def test_thread_parent_has_replies():
    message = {"ts": "1.0", "thread_ts": "1.0", "reply_count": 3}
    assert thread_ts(message) == "1.0"
    assert reply_count(message) == 3
    assert has_replies(message) is True


def test_plain_message_has_no_replies():
    message = {"ts": "1.0", "text": "hi"}
    assert thread_ts(message) is None
    assert has_replies(message) is False


def test_thread_without_reply_count():
    """thread_ts alone is not enough; replies must be counted."""
    assert has_replies({"ts": "1.0", "thread_ts": "1.0"}) is False
    assert has_replies({"ts": "1.0", "thread_ts": "1.0", "reply_count": 0}) is False


def test_malformed_reply_count():
    assert reply_count({"reply_count": "many"}) == 0


def test_message_text_and_ts():
    assert message_text({"ts": 1.5}) == ""
    assert message_text({"text": "障害です"}) == "障害です"
    assert message_ts({"ts": "1704067200.000100"}) == "1704067200.000100"


def test_ts_to_datetime_is_utc():
    posted = ts_to_datetime("1704067200.000100")
    assert posted == datetime(2024, 1, 1, 0, 0, 0, 100, tzinfo=timezone.utc)
