"""Rule-driven urgency/impact classification and incident type derivation.

Rules are stored as plain regex strings and compiled at evaluation time.
Among all enabled rules whose pattern matches, the one with the highest
level wins (high > medium > low). No match yields None, not a default.
"""

import logging
import re
from collections.abc import Iterable

from incident_tracker.errors import InvalidRulePatternError
from incident_tracker.models.classification import (
    ClassificationRule,
    IncidentType,
    Level,
)

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a rule pattern, raising InvalidRulePatternError if it is not valid."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidRulePatternError(pattern, str(exc)) from exc


def classify_level(
    text: str | None, rules: Iterable[ClassificationRule]
) -> Level | None:
    """Return the highest level among enabled rules matching ``text``.

    Args:
        text: Message text to match. None or empty matches nothing.
        rules: Urgency or impact rules; disabled rules are ignored.

    Returns:
        The winning Level, or None when no enabled rule fires.
    """
    enabled = [rule for rule in rules if rule.enabled]
    if not enabled:
        return None

    text = text or ""
    best: Level | None = None
    for rule in enabled:
        try:
            regex = validate_pattern(rule.pattern)
        except InvalidRulePatternError:
            logger.error(
                "Invalid regex pattern in rule %s: %s", rule.id, rule.pattern
            )
            continue

        if regex.search(text) and (best is None or rule.value.rank > best.rank):
            best = rule.value

    return best


def classify_urgency(
    text: str | None, rules: Iterable[ClassificationRule]
) -> Level | None:
    """Classify urgency against the urgency rule collection."""
    return classify_level(text, rules)


def classify_impact(
    text: str | None, rules: Iterable[ClassificationRule]
) -> Level | None:
    """Classify impact against the impact rule collection."""
    return classify_level(text, rules)


def determine_incident_type(
    urgency: Level | None, impact: Level | None
) -> IncidentType | None:
    """Derive the incident type from urgency and impact.

    - both None -> None (unclassifiable)
    - urgency high/medium, or impact high -> 障害 (outage)
    - otherwise -> 不具合 (bug)
    """
    if urgency is None and impact is None:
        return None

    if urgency in (Level.HIGH, Level.MEDIUM) or impact == Level.HIGH:
        return IncidentType.OUTAGE

    return IncidentType.BUG
