"""Data models and enums for the incident intake pipeline."""

from incident_tracker.models.classification import (
    ClassificationResult,
    ClassificationRule,
    ClassifyMessagesRequest,
    ClassifyRequest,
    IncidentLevel,
    IncidentType,
    Level,
    ManualClassification,
    RuleInput,
    RuleKind,
    RuleUpdate,
)
from incident_tracker.models.fetch import (
    Channel,
    ChannelInput,
    ChannelUpdate,
    FetchRequest,
    FetchResult,
    FetchRun,
    FetchStatus,
)
from incident_tracker.models.slack import SlackApiResponse, SlackMessage

__all__ = [
    "Channel",
    "ChannelInput",
    "ChannelUpdate",
    "ClassificationResult",
    "ClassificationRule",
    "ClassifyMessagesRequest",
    "ClassifyRequest",
    "FetchRequest",
    "FetchResult",
    "FetchRun",
    "FetchStatus",
    "IncidentLevel",
    "IncidentType",
    "Level",
    "ManualClassification",
    "RuleInput",
    "RuleKind",
    "RuleUpdate",
    "SlackApiResponse",
    "SlackMessage",
]
