"""SQLAlchemy-backed implementation of the storage interfaces.

Every write opens its own short session and commits immediately, so a run
that fails half-way leaves the already stored messages in place.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from incident_tracker.classification.rules import validate_pattern
from incident_tracker.errors import (
    ChannelNotFoundError,
    DuplicateChannelError,
    DuplicateMessageError,
    RuleNotFoundError,
)
from incident_tracker.models.classification import (
    ClassificationRule,
    Level,
    RuleInput,
    RuleKind,
    RuleUpdate,
)
from incident_tracker.models.fetch import Channel, ChannelUpdate, FetchRun, FetchStatus
from incident_tracker.models.slack import SlackMessage
from incident_tracker.storage.database import get_session_factory
from incident_tracker.storage.tables import (
    ChannelRow,
    FetchHistoryRow,
    ImpactRuleRow,
    SlackMessageRow,
    UrgencyRuleRow,
)

logger = logging.getLogger(__name__)

_RULE_TABLES = {
    RuleKind.URGENCY: UrgencyRuleRow,
    RuleKind.IMPACT: ImpactRuleRow,
}


def _to_channel(row: ChannelRow) -> Channel:
    return Channel(
        id=row.id,
        slack_channel_id=row.slack_channel_id,
        name=row.name,
        enabled=row.enabled,
    )


def _to_fetch_run(row: FetchHistoryRow) -> FetchRun:
    return FetchRun(
        id=row.id,
        channel_id=row.channel_id,
        range_from=row.range_from,
        range_to=row.range_to,
        status=FetchStatus(row.status),
        fetched_count=row.fetched_count,
        api_calls=row.api_calls,
        error_message=row.error_message,
    )


def _to_rule(kind: RuleKind, row: UrgencyRuleRow | ImpactRuleRow) -> ClassificationRule:
    return ClassificationRule(
        id=row.id,
        kind=kind,
        name=row.name,
        pattern=row.pattern,
        value=Level(row.value),
        enabled=row.enabled,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlStore:
    """Channels, messages, fetch history, and classification rules in one database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or get_session_factory()

    # -- Channels --

    async def list_channels(self) -> list[Channel]:
        """Registered channels, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ChannelRow).order_by(ChannelRow.created_at.desc())
            )
            return [_to_channel(row) for row in result.scalars()]

    async def add_channel(
        self, slack_channel_id: str, name: str, enabled: bool = True
    ) -> Channel:
        """Register a channel for ingestion.

        Raises:
            DuplicateChannelError: slack_channel_id is already registered.
        """
        async with self._session_factory() as session:
            row = ChannelRow(slack_channel_id=slack_channel_id, name=name, enabled=enabled)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                existing = await session.execute(
                    select(ChannelRow.id).where(ChannelRow.slack_channel_id == slack_channel_id)
                )
                if existing.first() is not None:
                    raise DuplicateChannelError(slack_channel_id) from exc
                raise
            return _to_channel(row)

    async def get_channel(self, channel_id: str) -> Channel | None:
        async with self._session_factory() as session:
            row = await session.get(ChannelRow, channel_id)
            return _to_channel(row) if row else None

    async def update_channel(self, channel_id: str, data: ChannelUpdate) -> Channel:
        """Rename or enable/disable a channel; unset fields are left untouched."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        async with self._session_factory() as session:
            row = await session.get(ChannelRow, channel_id)
            if row is None:
                raise ChannelNotFoundError(channel_id)
            for field, value in changes.items():
                setattr(row, field, value)
            await session.commit()
            return _to_channel(row)

    async def delete_channel(self, channel_id: str) -> None:
        """Unregister a channel. Messages already stored for it are kept."""
        async with self._session_factory() as session:
            row = await session.get(ChannelRow, channel_id)
            if row is None:
                raise ChannelNotFoundError(channel_id)
            await session.delete(row)
            await session.commit()

    # -- Messages --

    async def save_message(
        self, channel_id: str, slack_ts: str, raw: SlackMessage, posted_at: datetime
    ) -> None:
        """Insert one message.

        Raises:
            DuplicateMessageError: (channel_id, slack_ts) is already stored.
        """
        async with self._session_factory() as session:
            session.add(
                SlackMessageRow(
                    channel_id=channel_id,
                    slack_ts=slack_ts,
                    raw=raw,
                    posted_at=posted_at,
                )
            )
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if await self._message_exists(session, channel_id, slack_ts):
                    raise DuplicateMessageError(channel_id, slack_ts) from exc
                raise

    async def _message_exists(
        self, session: AsyncSession, channel_id: str, slack_ts: str
    ) -> bool:
        result = await session.execute(
            select(SlackMessageRow.id).where(
                SlackMessageRow.channel_id == channel_id,
                SlackMessageRow.slack_ts == slack_ts,
            )
        )
        return result.first() is not None

    async def count_messages(self, channel_id: str) -> int:
        """Number of stored messages for a channel."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count())
                .select_from(SlackMessageRow)
                .where(SlackMessageRow.channel_id == channel_id)
            )
            return result.scalar_one()

    async def list_message_ts(self, channel_id: str) -> list[str]:
        """Slack timestamps of stored messages, oldest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(SlackMessageRow.slack_ts)
                .where(SlackMessageRow.channel_id == channel_id)
                .order_by(SlackMessageRow.posted_at, SlackMessageRow.slack_ts)
            )
            return list(result.scalars())

    # -- Fetch history --

    async def create_fetch_run(
        self, channel_id: str, range_from: datetime, range_to: datetime
    ) -> FetchRun:
        async with self._session_factory() as session:
            row = FetchHistoryRow(
                channel_id=channel_id,
                range_from=range_from,
                range_to=range_to,
                status=FetchStatus.IN_PROGRESS.value,
                fetched_count=0,
                api_calls=0,
            )
            session.add(row)
            await session.commit()
            return _to_fetch_run(row)

    async def complete_fetch_run(
        self, run_id: str, fetched_count: int, api_calls: int
    ) -> None:
        await self._finish_fetch_run(
            run_id, FetchStatus.COMPLETED, fetched_count, api_calls, None
        )

    async def fail_fetch_run(
        self, run_id: str, fetched_count: int, api_calls: int, error_message: str
    ) -> None:
        await self._finish_fetch_run(
            run_id, FetchStatus.FAILED, fetched_count, api_calls, error_message
        )

    async def _finish_fetch_run(
        self,
        run_id: str,
        status: FetchStatus,
        fetched_count: int,
        api_calls: int,
        error_message: str | None,
    ) -> None:
        async with self._session_factory() as session:
            row = await session.get(FetchHistoryRow, run_id)
            if row is None:
                logger.warning("Fetch run %s disappeared before it could be closed", run_id)
                return
            row.status = status.value
            row.fetched_count = fetched_count
            row.api_calls = api_calls
            row.error_message = error_message
            await session.commit()

    async def get_fetch_run(self, run_id: str) -> FetchRun | None:
        async with self._session_factory() as session:
            row = await session.get(FetchHistoryRow, run_id)
            return _to_fetch_run(row) if row else None

    async def list_fetch_runs(self, channel_id: str) -> list[FetchRun]:
        """Fetch runs for a channel, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(FetchHistoryRow)
                .where(FetchHistoryRow.channel_id == channel_id)
                .order_by(FetchHistoryRow.created_at.desc())
            )
            return [_to_fetch_run(row) for row in result.scalars()]

    # -- Classification rules --

    async def list_rules(
        self, kind: RuleKind, enabled: bool | None = None
    ) -> list[ClassificationRule]:
        table = _RULE_TABLES[kind]
        query = select(table).order_by(table.created_at)
        if enabled is not None:
            query = query.where(table.enabled == enabled)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [_to_rule(kind, row) for row in result.scalars()]

    async def create_rule(self, kind: RuleKind, data: RuleInput) -> ClassificationRule:
        """Create a rule after checking its pattern compiles."""
        validate_pattern(data.pattern)
        table = _RULE_TABLES[kind]
        async with self._session_factory() as session:
            row = table(
                name=data.name,
                pattern=data.pattern,
                value=data.value.value,
                enabled=data.enabled,
            )
            session.add(row)
            await session.commit()
            return _to_rule(kind, row)

    async def update_rule(
        self, kind: RuleKind, rule_id: str, data: RuleUpdate
    ) -> ClassificationRule:
        """Apply a partial update; a new pattern must compile."""
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "pattern" in changes:
            validate_pattern(changes["pattern"])
        if "value" in changes:
            changes["value"] = Level(changes["value"]).value

        table = _RULE_TABLES[kind]
        async with self._session_factory() as session:
            row = await session.get(table, rule_id)
            if row is None:
                raise RuleNotFoundError(rule_id)
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = datetime.now(timezone.utc)
            await session.commit()
            return _to_rule(kind, row)

    async def delete_rule(self, kind: RuleKind, rule_id: str) -> None:
        table = _RULE_TABLES[kind]
        async with self._session_factory() as session:
            row = await session.get(table, rule_id)
            if row is None:
                raise RuleNotFoundError(rule_id)
            await session.delete(row)
            await session.commit()
