"""Async Slack client: cached AsyncWebClient plus a thin two-method wrapper.

get_slack_client() keeps the lazy-init singleton pattern; SlackClient turns
conversations.history / conversations.replies calls into SlackApiResponse
models and normalizes slack_sdk and aiohttp transport errors into
SlackRequestError. Retries are left to the RateLimiter.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from incident_tracker.config import get_settings
from incident_tracker.errors import SlackRequestError
from incident_tracker.models.slack import SlackApiResponse

_client: AsyncWebClient | None = None

# Raised by the aiohttp transport underneath AsyncWebClient
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (aiohttp.ClientError, asyncio.TimeoutError)


async def get_slack_client() -> AsyncWebClient:
    """Return a cached async Slack client instance.

    Creates the client on first call using slack_bot_token from settings.
    Subsequent calls return the cached instance.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = AsyncWebClient(token=settings.slack_bot_token)
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None


def _lower_headers(headers: Any) -> dict[str, str]:
    if not headers:
        return {}
    return {str(key).lower(): str(value) for key, value in dict(headers).items()}


def _normalize_error(exc: SlackApiError) -> SlackRequestError:
    """Map a slack_sdk error to SlackRequestError with status and retry-after."""
    response = exc.response
    data = response.data if isinstance(response.data, dict) else {}
    headers = _lower_headers(getattr(response, "headers", None))
    try:
        retry_after = float(headers["retry-after"])
    except (KeyError, ValueError):
        retry_after = None
    return SlackRequestError(
        error_code=data.get("error") or "unknown_error",
        status=getattr(response, "status_code", None),
        retry_after=retry_after,
        headers=headers,
    )


class SlackClient:
    """Request/response translator for the two Slack methods the pipeline uses."""

    def __init__(self, web_client: AsyncWebClient) -> None:
        self._web_client = web_client

    async def get_conversation_history(
        self,
        channel: str,
        oldest: str | None = None,
        latest: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> SlackApiResponse:
        """Fetch one page of channel history.

        See https://api.slack.com/methods/conversations.history
        """
        return await self._call(
            self._web_client.conversations_history,
            channel=channel,
            oldest=oldest,
            latest=latest,
            limit=limit,
            cursor=cursor,
        )

    async def get_thread_replies(
        self, channel: str, ts: str, cursor: str | None = None
    ) -> SlackApiResponse:
        """Fetch replies of a thread. The first message is the parent.

        See https://api.slack.com/methods/conversations.replies
        """
        return await self._call(
            self._web_client.conversations_replies,
            channel=channel,
            ts=ts,
            cursor=cursor,
        )

    async def _call(
        self, method: Callable[..., Awaitable[Any]], **params: Any
    ) -> SlackApiResponse:
        kwargs = {key: value for key, value in params.items() if value is not None}
        try:
            response = await method(**kwargs)
        except SlackApiError as exc:
            raise _normalize_error(exc) from exc
        except TRANSPORT_ERRORS as exc:
            raise SlackRequestError(error_code=type(exc).__name__) from exc

        data = response.data if isinstance(response.data, dict) else {}
        headers = _lower_headers(getattr(response, "headers", None))
        if not data.get("ok", False):
            raise SlackRequestError(
                error_code=data.get("error") or "unknown_error",
                status=getattr(response, "status_code", None),
                headers=headers,
            )

        return SlackApiResponse(
            ok=True,
            messages=data.get("messages") or [],
            headers=headers,
            response_metadata=data.get("response_metadata"),
        )


async def create_slack_client() -> SlackClient:
    """Build a SlackClient around the cached AsyncWebClient."""
    return SlackClient(await get_slack_client())
