# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the academy
enrollment API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src import __version__
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.infrastructure.database.connection import close_database, init_database
from src.infrastructure.events import get_event_bus
from src.infrastructure.notifications import get_class_assignment_notifier
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    Initializes and cleans up:
    - Logging
    - Database connections
    - Notification subscriptions on the event bus

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting academy enrollment API: environment=%s, debug=%s",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    await init_database(settings)
    logger.info("Database connection initialized")

    notifier = get_class_assignment_notifier()
    notifier.register(get_event_bus())
    logger.info("Class assignment notifications registered")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    get_event_bus().clear()

    await close_database()
    logger.info("Database connection closed")

    logger.info("Shutting down academy enrollment API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Authentication is provided by the surrounding deployment, which places
    a ``CurrentUser`` on ``request.state.user``.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Academy Enrollment API",
        description="Program enrollment and class assignment for a coding academy",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        redirect_slashes=False,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
