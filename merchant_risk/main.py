"""
Merchant Risk Engine - Main Application Entry Point

Scores merchant accounts from windowed behavioral signals, classifies them
into risk tiers and recommends reserve (funds-holding) policies.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import RedirectResponse

from merchant_risk import __version__
from merchant_risk.core.config import settings
from merchant_risk.core.logging import setup_logging
from merchant_risk.core.metrics import get_metrics, get_metrics_content_type
from merchant_risk.infrastructure.database import db_manager
from merchant_risk.presentation.api import api_router
from merchant_risk.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)
from merchant_risk.service.scoring import load_scoring_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Set up logging
    - Validate the scoring rules (fail fast on a malformed rule set)
    - Initialize database connection pool
    - Clean up on shutdown
    """
    setup_logging()
    rules = load_scoring_settings()
    db_manager.init()
    if settings.db_create_tables:
        await db_manager.create_all()

    logger = structlog.get_logger(__name__)
    logger.info(
        "application_started",
        service=settings.app_name,
        version=__version__,
        ruleset_fingerprint=rules.fingerprint,
    )

    yield

    await db_manager.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Merchant Risk Engine",
    description="Merchant credit-risk scoring and reserve recommendation",
    version=__version__,
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

error_handler_middleware(app)

app.include_router(api_router)


if settings.metrics_enabled:

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics(),
            media_type=get_metrics_content_type(),
        )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return RedirectResponse(url="/docs")


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "merchant_risk.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
