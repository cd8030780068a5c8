"""Slack ingestion: Web API client, rate limiter, and fetch orchestrator."""

from incident_tracker.slack.client import (
    SlackClient,
    create_slack_client,
    get_slack_client,
    reset_client,
)
from incident_tracker.slack.fetcher import SlackFetcher
from incident_tracker.slack.rate_limiter import RateLimiter, is_rate_limited

__all__ = [
    "create_slack_client",
    "get_slack_client",
    "is_rate_limited",
    "RateLimiter",
    "reset_client",
    "SlackClient",
    "SlackFetcher",
]
