"""JSON logs on stdout, one object per line.

Records carry `severity`, `timestamp`, `logger`, and a static `service`
field; anything passed through ``extra=`` (channel_id, fetched_count, ...)
is merged into the same object.

Usage:
    from incident_tracker.logging_config import configure_logging
    configure_logging(settings.log_level)
"""

import copy
import logging
import logging.config

SERVICE_NAME = "incident-tracker"

# Libraries whose INFO/DEBUG output drowns out the fetch logs
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "slack_sdk", "asyncio")

LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
                "name": "logger",
            },
            "static_fields": {"service": SERVICE_NAME},
        },
    },
    "handlers": {
        "stdout": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    "root": {"level": "INFO", "handlers": ["stdout"]},
}


def build_logging_config(level: str = "INFO") -> dict:
    """Return a copy of LOGGING_CONFIG with the root level set to ``level``.

    At DEBUG the quiet third-party loggers are let through as well.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    level = level.upper()
    config["root"]["level"] = level
    if level == "DEBUG":
        config["loggers"] = {}
    return config


def configure_logging(level: str = "INFO") -> None:
    """Install the JSON handler on the root logger. Called from the app lifespan."""
    logging.config.dictConfig(build_logging_config(level))
