"""Exception types shared across the intake pipeline."""


class IncidentTrackerError(Exception):
    """Base class for errors raised by this package."""


class SlackRequestError(IncidentTrackerError):
    """A Slack Web API call failed.

    Normalizes both non-ok JSON bodies and HTTP-level failures. ``status`` is
    the HTTP status code (429 for rate limiting), ``retry_after`` the
    server-provided delay in seconds when a ``retry-after`` header was sent.
    """

    def __init__(
        self,
        error_code: str,
        status: int | None = None,
        retry_after: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(f"Slack API error: {error_code}")
        self.error_code = error_code
        self.status = status
        self.retry_after = retry_after
        self.headers = headers or {}


class ChannelNotFoundError(IncidentTrackerError):
    """No channel row exists for the requested id."""

    def __init__(self, channel_id: str) -> None:
        super().__init__("Channel not found")
        self.channel_id = channel_id


class DuplicateChannelError(IncidentTrackerError):
    """A channel with the same Slack channel id is already registered."""

    def __init__(self, slack_channel_id: str) -> None:
        super().__init__("Channel with this Slack ID already exists")
        self.slack_channel_id = slack_channel_id


class DuplicateMessageError(IncidentTrackerError):
    """A message with the same (channel_id, slack_ts) is already stored."""

    def __init__(self, channel_id: str, slack_ts: str) -> None:
        super().__init__(f"Message {slack_ts} already stored for channel {channel_id}")
        self.channel_id = channel_id
        self.slack_ts = slack_ts


class InvalidRulePatternError(IncidentTrackerError):
    """A classification rule pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid regex pattern {pattern!r}{detail}")
        self.pattern = pattern


class RuleNotFoundError(IncidentTrackerError):
    """No classification rule exists with the given id."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule not found: {rule_id}")
        self.rule_id = rule_id
