"""FastAPI dependencies: shared secret check and service wiring.

Tests swap any of these out through ``app.dependency_overrides``.
"""

import hmac

from fastapi import Depends, HTTPException, Request

from incident_tracker.classification.classifier import IncidentClassifier
from incident_tracker.config import get_settings
from incident_tracker.slack.client import create_slack_client
from incident_tracker.slack.fetcher import SlackFetcher
from incident_tracker.slack.rate_limiter import RateLimiter
from incident_tracker.storage.repository import SqlStore

_rate_limiter: RateLimiter | None = None


async def verify_api_secret(request: Request) -> None:
    """Check the X-Api-Secret header against the configured secret.

    Raises HTTPException 403 if the header is missing, empty, or mismatched.
    """
    settings = get_settings()
    secret = request.headers.get("X-Api-Secret", "")
    if not settings.api_secret or not hmac.compare_digest(secret, settings.api_secret):
        raise HTTPException(status_code=403, detail="Invalid API secret")


def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter so every fetch shares one Slack budget."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter.from_settings()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter. Used for testing."""
    global _rate_limiter
    _rate_limiter = None


def get_store() -> SqlStore:
    return SqlStore()


async def get_fetcher(store: SqlStore = Depends(get_store)) -> SlackFetcher:
    settings = get_settings()
    return SlackFetcher(
        await create_slack_client(),
        store,
        get_rate_limiter(),
        page_size=settings.slack_history_page_size,
    )


def get_classifier(store: SqlStore = Depends(get_store)) -> IncidentClassifier:
    return IncidentClassifier(store)
