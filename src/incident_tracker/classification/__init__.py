"""Incident classification: regex rules, keyword fallback, and type derivation."""

from incident_tracker.classification.classifier import (
    UNSET,
    IncidentClassifier,
    apply_manual_classification,
)
from incident_tracker.classification.keywords import (
    classify_impact_keywords,
    classify_urgency_keywords,
    determine_incident_level,
)
from incident_tracker.classification.rules import (
    classify_impact,
    classify_level,
    classify_urgency,
    determine_incident_type,
    validate_pattern,
)

__all__ = [
    "apply_manual_classification",
    "classify_impact",
    "classify_impact_keywords",
    "classify_level",
    "classify_urgency",
    "classify_urgency_keywords",
    "determine_incident_level",
    "determine_incident_type",
    "IncidentClassifier",
    "UNSET",
    "validate_pattern",
]
