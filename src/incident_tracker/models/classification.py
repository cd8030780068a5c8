"""Classification levels, rules, and incident type models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Level(str, Enum):
    """Urgency / impact level shared by both rule collections."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Fixed precedence: high=3 > medium=2 > low=1."""
        return _LEVEL_RANK[self]


_LEVEL_RANK = {Level.HIGH: 3, Level.MEDIUM: 2, Level.LOW: 1}


class RuleKind(str, Enum):
    """Which rule collection a rule belongs to."""

    URGENCY = "urgency"
    IMPACT = "impact"


class IncidentType(str, Enum):
    """Incident type derived from urgency and impact."""

    OUTAGE = "障害"
    BUG = "不具合"


class IncidentLevel(str, Enum):
    """Incident level produced by the hardcoded keyword strategy."""

    OUTAGE = "outage"
    BUG = "bug"


class ClassificationRule(BaseModel):
    """A stored regex-to-level rule."""

    id: str
    kind: RuleKind
    name: str
    pattern: str  # Regular expression source, compiled at evaluation time
    value: Level
    enabled: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RuleInput(BaseModel):
    """Payload for creating a rule."""

    name: str = Field(min_length=1, max_length=100)
    pattern: str = Field(min_length=1, max_length=200)
    value: Level
    enabled: bool = True


class RuleUpdate(BaseModel):
    """Partial payload for updating a rule; unset fields are left untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    pattern: str | None = Field(default=None, min_length=1, max_length=200)
    value: Level | None = None
    enabled: bool | None = None


class ClassifyRequest(BaseModel):
    """Text to classify: a parent message plus optional thread replies."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    thread_texts: list[str] = Field(default_factory=list, alias="threadTexts")


class ClassifyMessagesRequest(BaseModel):
    """Raw Slack message payloads to classify, as returned by conversations.replies."""

    message: dict[str, Any]
    replies: list[dict[str, Any]] = Field(default_factory=list)


class ClassificationResult(BaseModel):
    """Outcome of classifying a message and its thread."""

    urgency: Level | None = None
    impact: Level | None = None
    type: IncidentType | None = None
    auto_classified: bool = True


class ManualClassification(BaseModel):
    """Classification after applying manual overrides."""

    urgency: Level | None = None
    impact: Level | None = None
    type: IncidentType | None = None
    urgency_manual: bool = False
    impact_manual: bool = False
