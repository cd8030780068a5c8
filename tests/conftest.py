"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from incident_tracker.app import app
from incident_tracker.storage.database import create_engine, init_db
from incident_tracker.storage.repository import SqlStore


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
async def store():
    """SqlStore over a fresh in-memory SQLite database."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    yield SqlStore(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()
