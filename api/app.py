"""FastAPI application for Jhonote."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from .database import Database
from .errors import register_exception_handlers
from .observability import initialize_observability
from .routes import auth_router, health_router, notes_router

# Initialize logger
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("api_starting")

    initialize_observability()

    await Database.connect()
    logger.info("api_started")

    yield

    logger.info("api_shutting_down")
    await Database.disconnect()
    logger.info("api_shutdown_complete")


app = FastAPI(
    title="Jhonote API",
    description="Personal notes with tags, priorities, due dates and a trash bin",
    version="0.1.0",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(notes_router)
