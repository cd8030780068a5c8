"""Persistence: storage interfaces and the SQLAlchemy implementation."""

from incident_tracker.storage.database import (
    create_engine,
    get_engine,
    get_session_factory,
    init_db,
    reset_engine,
)
from incident_tracker.storage.interfaces import (
    ChannelStore,
    FetchRunStore,
    IngestStore,
    MessageStore,
    RuleStore,
)
from incident_tracker.storage.repository import SqlStore

__all__ = [
    "ChannelStore",
    "create_engine",
    "FetchRunStore",
    "get_engine",
    "get_session_factory",
    "IngestStore",
    "init_db",
    "MessageStore",
    "reset_engine",
    "RuleStore",
    "SqlStore",
]
