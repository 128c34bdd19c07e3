"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from psycopg_pool import AsyncConnectionPool

from affiliate_signup.adapters.repository.postgres import run_migrations
from affiliate_signup.api.dependencies import build_form_registry, get_pool
from affiliate_signup.api.v1 import router as v1_router
from affiliate_signup.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Affiliate Registration API v1 - Open a form, submit candidates, read outcomes",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup
    - Runs migrations on startup
    - Creates the in-memory form registry
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    await pool.open()

    logger.info("Running database migrations...")
    await run_migrations(pool)

    # Store pool and forms in app state for dependency injection
    app.state.pool = pool
    app.state.forms = build_form_registry(pool, settings)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="affiliate-signup",
    description="Affiliate Registration API - Ordered admission of new hotel and resort affiliates",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(pool: AsyncConnectionPool = Depends(get_pool)) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")

    return {"status": "healthy"}
