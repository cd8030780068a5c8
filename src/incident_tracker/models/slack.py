"""Slack Web API response model and raw-message accessors.

Raw Slack messages are kept as plain dicts (stored opaquely); the helpers
below read the handful of fields the pipeline actually needs.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

SlackMessage = dict[str, Any]


class ResponseMetadata(BaseModel):
    """Pagination block of a Slack response."""

    next_cursor: str | None = None


class SlackApiResponse(BaseModel):
    """Normalized conversations.history / conversations.replies response."""

    ok: bool
    messages: list[SlackMessage] = Field(default_factory=list)
    error: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    response_metadata: ResponseMetadata | None = None

    @property
    def next_cursor(self) -> str | None:
        """Cursor for the next page, or None when this is the last page."""
        if self.response_metadata is None:
            return None
        return self.response_metadata.next_cursor or None


def message_ts(message: SlackMessage) -> str:
    """Return the message timestamp ("1234567890.123456")."""
    return str(message["ts"])


def thread_ts(message: SlackMessage) -> str | None:
    """Return the thread marker, or None for messages outside a thread."""
    value = message.get("thread_ts")
    return str(value) if value else None


def reply_count(message: SlackMessage) -> int:
    """Return the number of thread replies (0 when absent or malformed)."""
    try:
        return int(message.get("reply_count") or 0)
    except (TypeError, ValueError):
        return 0


def has_replies(message: SlackMessage) -> bool:
    """True if the message is a thread parent with at least one reply."""
    return thread_ts(message) is not None and reply_count(message) > 0


def message_text(message: SlackMessage) -> str:
    """Return the message text, empty string if absent."""
    return message.get("text") or ""


def ts_to_datetime(ts: str) -> datetime:
    """Convert a Slack timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)
