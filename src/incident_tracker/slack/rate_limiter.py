"""Sliding-window rate limiter with 429 backoff for Slack Web API calls.

Slack Tier 2 methods (conversations.history, conversations.replies) allow
roughly 20 requests per minute. The limiter keeps a ledger of call
timestamps and suspends callers once the window is full. Calls rejected with
HTTP 429 are retried by tenacity, honoring the server's Retry-After header
and falling back to 1s, 2s, 4s... exponential backoff.

One limiter instance is meant to be shared by every fetch in the process so
that concurrent fetches draw from the same budget.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from typing import TypeVar

from slack_sdk.errors import SlackApiError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
)

from incident_tracker.config import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMITED_STATUS = 429


def _header(headers: Mapping[str, str], name: str) -> str | None:
    """Case-insensitive header lookup."""
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def rate_limit_status(error: BaseException) -> int | None:
    """Return the HTTP status carried by an error, if any."""
    status = getattr(error, "status", None)
    if status is None and isinstance(error, SlackApiError):
        status = getattr(error.response, "status_code", None)
    return status


def is_rate_limited(error: BaseException) -> bool:
    """True if the error is an explicit rate-limit signal (HTTP 429)."""
    return rate_limit_status(error) == RATE_LIMITED_STATUS


def retry_after_seconds(error: BaseException) -> float | None:
    """Return the server-provided retry delay in seconds, or None.

    Looks at a ``retry_after`` attribute first, then a ``retry-after``
    header on the error (or on a slack_sdk response).
    """
    value = getattr(error, "retry_after", None)
    if value is None:
        headers = getattr(error, "headers", None)
        if headers is None and isinstance(error, SlackApiError):
            headers = getattr(error.response, "headers", None)
        if headers:
            value = _header(headers, "retry-after")
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable retry-after value: %r", value)
        return None


class RateLimiter:
    """Throttle and retry async operations against a shared request budget."""

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 60.0,
        max_retries: int = 3,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_retries = max_retries
        self._clock = clock
        self._sleep = sleep
        self._calls: deque[float] = deque()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RateLimiter":
        """Build a limiter from the configured Slack rate-limit settings."""
        settings = settings or get_settings()
        return cls(
            max_requests=settings.slack_rate_limit_max_requests,
            window_seconds=settings.slack_rate_limit_window_seconds,
            max_retries=settings.slack_rate_limit_max_retries,
        )

    @property
    def recorded_calls(self) -> int:
        """Number of call timestamps currently held in the ledger."""
        return len(self._calls)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` within the request budget, retrying on 429.

        Raises the operation's last error once retries are exhausted, or any
        non-rate-limit error immediately.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(is_rate_limited),
            wait=self._backoff_delay,
            stop=stop_after_attempt(self.max_retries + 1),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return await retrying(self._attempt, operation)

    async def _attempt(self, operation: Callable[[], Awaitable[T]]) -> T:
        await self._acquire()
        return await operation()

    async def _acquire(self) -> None:
        """Wait for a free slot in the window, then record this call.

        Re-checks the window after every wake-up since other coroutines may
        have taken the slot while this one was suspended.
        """
        while True:
            now = self._clock()
            window_start = now - self.window_seconds
            # A call made exactly window_seconds ago no longer counts
            while self._calls and self._calls[0] <= window_start:
                self._calls.popleft()

            if len(self._calls) >= self.max_requests:
                wait = self._calls[0] + self.window_seconds - now
                if wait <= 0:
                    self._calls.popleft()
                    continue
                logger.info(
                    "Rate limit window full (%d/%d), waiting %.2fs",
                    len(self._calls),
                    self.max_requests,
                    wait,
                )
                await self._sleep(wait)
                continue

            self._calls.append(now)
            return

    @staticmethod
    def _backoff_delay(retry_state: RetryCallState) -> float:
        """Retry-After when the server sent one, else 2 ** retry_count seconds."""
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if error is not None:
            retry_after = retry_after_seconds(error)
            if retry_after is not None:
                return retry_after
        return float(2 ** (retry_state.attempt_number - 1))
