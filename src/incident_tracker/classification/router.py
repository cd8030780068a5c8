"""Classification and rule administration endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response

from incident_tracker.classification.classifier import IncidentClassifier
from incident_tracker.dependencies import get_classifier, get_store, verify_api_secret
from incident_tracker.errors import InvalidRulePatternError, RuleNotFoundError
from incident_tracker.models.classification import (
    ClassificationResult,
    ClassificationRule,
    ClassifyMessagesRequest,
    ClassifyRequest,
    RuleInput,
    RuleKind,
    RuleUpdate,
)
from incident_tracker.storage.repository import SqlStore

router = APIRouter(prefix="", tags=["classification"])


@router.post("/incidents/classify", response_model=ClassificationResult)
async def classify_incident(
    request: ClassifyRequest,
    classifier: IncidentClassifier = Depends(get_classifier),
) -> ClassificationResult:
    """Classify a message and its thread with the enabled rules."""
    return await classifier.classify(request.text, request.thread_texts)


@router.post("/incidents/classify/messages", response_model=ClassificationResult)
async def classify_slack_messages(
    request: ClassifyMessagesRequest,
    classifier: IncidentClassifier = Depends(get_classifier),
) -> ClassificationResult:
    """Classify a raw Slack parent message and its replies."""
    return await classifier.classify_messages(request.message, request.replies)


@router.get("/rules/{kind}", response_model=list[ClassificationRule])
async def list_rules(
    kind: RuleKind,
    enabled: bool | None = None,
    store: SqlStore = Depends(get_store),
) -> list[ClassificationRule]:
    return await store.list_rules(kind, enabled=enabled)


@router.post(
    "/rules/{kind}",
    response_model=ClassificationRule,
    status_code=201,
    dependencies=[Depends(verify_api_secret)],
)
async def create_rule(
    kind: RuleKind,
    data: RuleInput,
    store: SqlStore = Depends(get_store),
) -> ClassificationRule:
    try:
        return await store.create_rule(kind, data)
    except InvalidRulePatternError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.patch(
    "/rules/{kind}/{rule_id}",
    response_model=ClassificationRule,
    dependencies=[Depends(verify_api_secret)],
)
async def update_rule(
    kind: RuleKind,
    rule_id: str,
    data: RuleUpdate,
    store: SqlStore = Depends(get_store),
) -> ClassificationRule:
    try:
        return await store.update_rule(kind, rule_id, data)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"{kind.value} rule not found") from exc
    except InvalidRulePatternError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete(
    "/rules/{kind}/{rule_id}",
    status_code=204,
    dependencies=[Depends(verify_api_secret)],
)
async def delete_rule(
    kind: RuleKind,
    rule_id: str,
    store: SqlStore = Depends(get_store),
) -> Response:
    try:
        await store.delete_rule(kind, rule_id)
    except RuleNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"{kind.value} rule not found") from exc
    return Response(status_code=204)
