"""FastAPI entry point: lifespan wiring, routers, and the health check."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from incident_tracker.classification.router import router as classification_router
from incident_tracker.config import get_settings
from incident_tracker.logging_config import SERVICE_NAME, configure_logging
from incident_tracker.slack.router import router as slack_router
from incident_tracker.storage.database import init_db, reset_engine

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and create missing tables; dispose the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    await init_db()
    logger.info("Incident tracker started", extra={"environment": settings.environment})
    yield
    await reset_engine()
    logger.info("Incident tracker stopped")


app = FastAPI(
    title="Incident Tracker",
    description="Slack channel ingestion and incident classification",
    version=VERSION,
    lifespan=lifespan,
)
app.include_router(slack_router)
app.include_router(classification_router)


@app.get("/health")
async def health():
    """Liveness check. Touches neither Slack nor the database."""
    return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}
