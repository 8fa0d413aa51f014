"""
Limit Automation - Main Application Entry Point

A credit-limit application service that takes debtor applications through
intake, decides them automatically against the client's insurance policies
and insurer appetite, and renews approved limits.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from limit_automation import __version__
from limit_automation.core.config import settings
from limit_automation.core.dependencies import get_automation_runner
from limit_automation.core.logging import setup_logging
from limit_automation.core.metrics import get_metrics, get_metrics_content_type
from limit_automation.infrastructure.database import db_manager
from limit_automation.presentation.api import api_router
from limit_automation.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Set up logging
    - Initialize database connection pool
    - Cancel background decisioning and close the pool on shutdown
    """
    setup_logging()
    db_manager.init()

    logger = structlog.get_logger(__name__)
    logger.info("application_started", version=__version__)

    yield

    await get_automation_runner().shutdown()
    await db_manager.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Limit Automation",
    description="Credit-limit application intake, automated decisioning and renewal",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

error_handler_middleware(app)

app.include_router(api_router)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type(),
    )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return RedirectResponse(url="/docs")
