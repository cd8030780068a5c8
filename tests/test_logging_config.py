"""Tests for the JSON logging configuration."""

import json
import logging
from unittest.mock import patch

from pythonjsonlogger.json import JsonFormatter

from incident_tracker.logging_config import (
    LOGGING_CONFIG,
    build_logging_config,
    configure_logging,
)


def _formatter() -> JsonFormatter:
    options = LOGGING_CONFIG["formatters"]["json"]
    return JsonFormatter(
        options["format"],
        rename_fields=options["rename_fields"],
        static_fields=options["static_fields"],
    )


def test_build_logging_config_sets_level():
    config = build_logging_config("debug")
    assert config["root"]["level"] == "DEBUG"


def test_build_logging_config_does_not_mutate_base():
    build_logging_config("WARNING")
    assert LOGGING_CONFIG["root"]["level"] == "INFO"


def test_third_party_loggers_are_quiet_by_default():
    config = build_logging_config("INFO")
    assert config["loggers"]["sqlalchemy.engine"] == {"level": "WARNING"}
    assert config["loggers"]["slack_sdk"] == {"level": "WARNING"}


def test_debug_lets_third_party_loggers_through():
    assert build_logging_config("DEBUG")["loggers"] == {}


def test_json_output_fields():
    """Records are rendered with severity, logger, and the service name."""
    record = logging.LogRecord(
        name="incident_tracker.slack.fetcher",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Rate limit window full",
        args=(),
        exc_info=None,
    )
    record.channel_id = "chan-1"

    payload = json.loads(_formatter().format(record))

    assert payload["severity"] == "WARNING"
    assert payload["logger"] == "incident_tracker.slack.fetcher"
    assert payload["message"] == "Rate limit window full"
    assert payload["service"] == "incident-tracker"
    assert payload["channel_id"] == "chan-1"


def test_configure_logging_applies_config():
    with patch("incident_tracker.logging_config.logging.config.dictConfig") as mock_dict_config:
        configure_logging("error")

    config = mock_dict_config.call_args.args[0]
    assert config["root"]["level"] == "ERROR"
    assert config["formatters"]["json"]["()"] == "pythonjsonlogger.json.JsonFormatter"
