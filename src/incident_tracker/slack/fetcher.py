"""Fetch orchestrator: Slack channel history + threads -> stored messages.

For one channel and date range:
1. Look up the channel (missing -> failed result, no Slack calls)
2. Open a fetch run (status in_progress)
3. Page through conversations.history via the rate limiter
4. Store every message, absorbing duplicates
5. Expand threads via conversations.replies, skipping the parent
6. Close the fetch run as completed, or failed with the error message

A failed thread fetch is logged and skipped; it never fails the run. Any
other error fails the run but keeps the messages stored so far.
"""

import logging

from incident_tracker.errors import (
    ChannelNotFoundError,
    DuplicateMessageError,
    SlackRequestError,
)
from incident_tracker.models.fetch import Channel, FetchRequest, FetchResult, FetchStatus
from incident_tracker.models.slack import (
    SlackApiResponse,
    SlackMessage,
    has_replies,
    message_ts,
    thread_ts,
    ts_to_datetime,
)
from incident_tracker.slack.client import TRANSPORT_ERRORS, SlackClient
from incident_tracker.slack.rate_limiter import RateLimiter
from incident_tracker.storage.interfaces import IngestStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class _RunCounters:
    """Counts accumulated during one run, kept for the failure path."""

    def __init__(self) -> None:
        self.fetched_count = 0
        self.api_calls = 0


class SlackFetcher:
    """Fetches and stores Slack messages for a channel and date range."""

    def __init__(
        self,
        slack_client: SlackClient,
        store: IngestStore,
        rate_limiter: RateLimiter,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._slack = slack_client
        self._store = store
        self._limiter = rate_limiter
        self._page_size = page_size

    async def fetch_channel_messages(self, request: FetchRequest) -> FetchResult:
        """Fetch, store, and record one run. Never raises for run-level failures."""
        counters = _RunCounters()
        run_id: str | None = None

        try:
            channel = await self._store.get_channel(request.channel_id)
            if channel is None:
                raise ChannelNotFoundError(request.channel_id)
            if not channel.enabled:
                logger.info("Fetching disabled channel %s", channel.name)

            run = await self._store.create_fetch_run(
                request.channel_id, request.start_date, request.end_date
            )
            run_id = run.id

            oldest = str(int(request.start_date.timestamp()))
            latest = str(int(request.end_date.timestamp()))

            messages = await self._fetch_history(channel, oldest, latest, counters)

            for message in messages:
                await self._save(request.channel_id, message, counters)
                if has_replies(message):
                    await self._fetch_thread(channel, request.channel_id, message, counters)

            await self._store.complete_fetch_run(
                run_id, counters.fetched_count, counters.api_calls
            )
        except Exception as exc:
            error_message = str(exc) or type(exc).__name__
            logger.error(
                "Slack fetch failed for channel %s: %s",
                request.channel_id,
                error_message,
                exc_info=not isinstance(exc, ChannelNotFoundError),
            )
            if run_id is not None:
                await self._store.fail_fetch_run(
                    run_id, counters.fetched_count, counters.api_calls, error_message
                )
            return FetchResult(
                fetched_count=counters.fetched_count,
                status=FetchStatus.FAILED,
                error=error_message,
            )

        logger.info(
            "Slack fetch completed",
            extra={
                "channel_id": request.channel_id,
                "fetched_count": counters.fetched_count,
                "api_calls": counters.api_calls,
            },
        )
        return FetchResult(
            fetched_count=counters.fetched_count, status=FetchStatus.COMPLETED
        )

    async def _fetch_history(
        self, channel: Channel, oldest: str, latest: str, counters: _RunCounters
    ) -> list[SlackMessage]:
        """Follow next_cursor until Slack stops returning one."""
        messages: list[SlackMessage] = []
        cursor: str | None = None

        while True:
            response: SlackApiResponse = await self._limiter.execute(
                lambda: self._slack.get_conversation_history(
                    channel=channel.slack_channel_id,
                    oldest=oldest,
                    latest=latest,
                    limit=self._page_size,
                    cursor=cursor,
                )
            )
            counters.api_calls += 1

            if not response.ok:
                raise SlackRequestError(response.error or "unknown_error")

            messages.extend(response.messages)
            cursor = response.next_cursor
            if not cursor:
                return messages

    async def _fetch_thread(
        self,
        channel: Channel,
        channel_id: str,
        parent: SlackMessage,
        counters: _RunCounters,
    ) -> None:
        """Store replies of one thread. Failures are logged, not raised."""
        parent_ts = thread_ts(parent)
        try:
            response: SlackApiResponse = await self._limiter.execute(
                lambda: self._slack.get_thread_replies(
                    channel=channel.slack_channel_id, ts=parent_ts
                )
            )
        except (SlackRequestError, *TRANSPORT_ERRORS) as exc:
            counters.api_calls += 1
            logger.error(
                "Failed to fetch thread %s: %s", parent_ts, str(exc) or type(exc).__name__
            )
            return
        counters.api_calls += 1

        if not response.ok:
            logger.error(
                "Failed to fetch thread %s: %s", parent_ts, response.error or "No response"
            )
            return

        # The first message is the parent, stored already
        for reply in response.messages[1:]:
            await self._save(channel_id, reply, counters)

    async def _save(
        self, channel_id: str, message: SlackMessage, counters: _RunCounters
    ) -> None:
        ts = message_ts(message)
        try:
            await self._store.save_message(channel_id, ts, message, ts_to_datetime(ts))
        except DuplicateMessageError:
            return
        counters.fetched_count += 1
