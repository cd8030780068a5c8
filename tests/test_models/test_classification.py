"""Tests for classification models."""

import pytest
from pydantic import ValidationError

from incident_tracker.models.classification import (
    ClassifyRequest,
    IncidentType,
    Level,
    RuleInput,
    RuleUpdate,
)


def test_level_rank_order():
    assert Level.HIGH.rank > Level.MEDIUM.rank > Level.LOW.rank


def test_incident_type_values():
    assert IncidentType.OUTAGE.value == "障害"
    assert IncidentType.BUG.value == "不具合"


def test_rule_input_defaults_to_enabled():
    rule = RuleInput(name="停止", pattern="停止", value="high")
    assert rule.enabled is True
    assert rule.value == Level.HIGH


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "", "pattern": "x", "value": "high"},
        {"name": "x" * 101, "pattern": "x", "value": "high"},
        {"name": "x", "pattern": "", "value": "high"},
        {"name": "x", "pattern": "x" * 201, "value": "high"},
        {"name": "x", "pattern": "x", "value": "urgent"},
    ],
)
def test_rule_input_validation(fields):
    with pytest.raises(ValidationError):
        RuleInput(**fields)


def test_rule_update_tracks_set_fields():
    update = RuleUpdate(enabled=False)
    assert update.model_dump(exclude_unset=True) == {"enabled": False}


def test_classify_request_aliases():
    request = ClassifyRequest.model_validate({"text": "a", "threadTexts": ["b"]})
    assert request.thread_texts == ["b"]
    assert ClassifyRequest(text="a").thread_texts == []
