"""Channel and fetch-run models for the ingestion pipeline."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Channel(BaseModel):
    """A Slack channel registered for ingestion."""

    id: str
    slack_channel_id: str  # e.g., "C0123ABCD"
    name: str
    enabled: bool = True


SLACK_CHANNEL_ID_PATTERN = r"^C[A-Z0-9]+$"


class ChannelInput(BaseModel):
    """Payload for registering a channel. Accepts camelCase keys from the API."""

    model_config = ConfigDict(populate_by_name=True)

    slack_channel_id: str = Field(alias="slackChannelId", pattern=SLACK_CHANNEL_ID_PATTERN)
    name: str = Field(min_length=1, max_length=255)
    enabled: bool = True


class ChannelUpdate(BaseModel):
    """Partial channel update. The Slack channel id cannot be changed."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    enabled: bool | None = None


class FetchStatus(str, Enum):
    """Lifecycle of a fetch run."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"


class FetchRun(BaseModel):
    """Bookkeeping row for one fetch invocation."""

    id: str
    channel_id: str
    range_from: datetime
    range_to: datetime
    status: FetchStatus = FetchStatus.IN_PROGRESS
    fetched_count: int = 0
    api_calls: int = 0
    error_message: str | None = None


class FetchRequest(BaseModel):
    """Fetch one channel over a date range. Accepts camelCase keys from the API."""

    model_config = ConfigDict(populate_by_name=True)

    channel_id: str = Field(alias="channelId", min_length=1)
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive datetimes are interpreted as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_range(self) -> "FetchRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not precede startDate")
        return self


class FetchResult(BaseModel):
    """Outcome returned to callers of the fetcher."""

    model_config = ConfigDict(populate_by_name=True)

    fetched_count: int = Field(default=0, alias="fetchedCount")
    status: FetchStatus
    error: str | None = None
