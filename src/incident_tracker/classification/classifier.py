"""Incident classifier: message + thread text -> urgency, impact, type."""

import logging
from collections.abc import Sequence
from typing import Final

from incident_tracker.classification.rules import (
    classify_impact,
    classify_urgency,
    determine_incident_type,
)
from incident_tracker.models.classification import (
    ClassificationResult,
    Level,
    ManualClassification,
    RuleKind,
)
from incident_tracker.models.slack import SlackMessage, message_text
from incident_tracker.storage.interfaces import RuleStore

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


class IncidentClassifier:
    """Classifies Slack messages using the enabled rules in a RuleStore."""

    def __init__(self, rule_store: RuleStore) -> None:
        self._rules = rule_store

    async def classify(
        self, message_text: str, thread_texts: Sequence[str] = ()
    ) -> ClassificationResult:
        """Classify a message together with its thread replies.

        The parent text and all thread texts are joined with a space and
        evaluated once against the urgency rules and once against the
        impact rules.
        """
        combined = " ".join([message_text or "", *thread_texts])

        urgency_rules = await self._rules.list_rules(RuleKind.URGENCY, enabled=True)
        impact_rules = await self._rules.list_rules(RuleKind.IMPACT, enabled=True)

        urgency = classify_urgency(combined, urgency_rules)
        impact = classify_impact(combined, impact_rules)
        incident_type = determine_incident_type(urgency, impact)

        logger.debug(
            "Classified message",
            extra={
                "urgency": urgency.value if urgency else None,
                "impact": impact.value if impact else None,
                "urgency_rules": len(urgency_rules),
                "impact_rules": len(impact_rules),
            },
        )
        return ClassificationResult(
            urgency=urgency,
            impact=impact,
            type=incident_type,
            auto_classified=True,
        )

    async def classify_messages(
        self, parent: SlackMessage, replies: Sequence[SlackMessage] = ()
    ) -> ClassificationResult:
        """Classify raw Slack payloads. Messages without text count as empty."""
        return await self.classify(
            message_text(parent), [message_text(reply) for reply in replies]
        )


def apply_manual_classification(
    current_urgency: Level | None,
    current_impact: Level | None,
    urgency: Level | None | _Unset = UNSET,
    impact: Level | None | _Unset = UNSET,
) -> ManualClassification:
    """Overlay manually chosen levels on the current classification.

    A value passed explicitly, None included, replaces the current one and
    marks that dimension as manual. The incident type is re-derived from the
    resulting pair.
    """
    final_urgency = current_urgency if isinstance(urgency, _Unset) else urgency
    final_impact = current_impact if isinstance(impact, _Unset) else impact

    return ManualClassification(
        urgency=final_urgency,
        impact=final_impact,
        type=determine_incident_type(final_urgency, final_impact),
        urgency_manual=not isinstance(urgency, _Unset),
        impact_manual=not isinstance(impact, _Unset),
    )
