"""Storage interfaces consumed by the fetcher and classifier.

Any backend works as long as MessageStore.save_message raises
DuplicateMessageError (and only that) when (channel_id, slack_ts) is
already stored.
"""

from datetime import datetime
from typing import Protocol

from incident_tracker.models.classification import (
    ClassificationRule,
    RuleInput,
    RuleKind,
    RuleUpdate,
)
from incident_tracker.models.fetch import Channel, ChannelUpdate, FetchRun
from incident_tracker.models.slack import SlackMessage


class ChannelStore(Protocol):
    async def list_channels(self) -> list[Channel]: ...

    async def add_channel(
        self, slack_channel_id: str, name: str, enabled: bool = True
    ) -> Channel: ...

    async def get_channel(self, channel_id: str) -> Channel | None: ...

    async def update_channel(self, channel_id: str, data: ChannelUpdate) -> Channel: ...

    async def delete_channel(self, channel_id: str) -> None: ...


class MessageStore(Protocol):
    async def save_message(
        self, channel_id: str, slack_ts: str, raw: SlackMessage, posted_at: datetime
    ) -> None: ...


class FetchRunStore(Protocol):
    async def create_fetch_run(
        self, channel_id: str, range_from: datetime, range_to: datetime
    ) -> FetchRun: ...

    async def complete_fetch_run(
        self, run_id: str, fetched_count: int, api_calls: int
    ) -> None: ...

    async def fail_fetch_run(
        self, run_id: str, fetched_count: int, api_calls: int, error_message: str
    ) -> None: ...


class RuleStore(Protocol):
    async def list_rules(
        self, kind: RuleKind, enabled: bool | None = None
    ) -> list[ClassificationRule]: ...

    async def create_rule(self, kind: RuleKind, data: RuleInput) -> ClassificationRule: ...

    async def update_rule(
        self, kind: RuleKind, rule_id: str, data: RuleUpdate
    ) -> ClassificationRule: ...

    async def delete_rule(self, kind: RuleKind, rule_id: str) -> None: ...


class IngestStore(ChannelStore, MessageStore, FetchRunStore, Protocol):
    """Everything the fetcher needs from storage."""
