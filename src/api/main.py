"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryStore
from src.adapters.repository.postgres import run_migrations
from src.adapters.sessions.memory import InMemorySessionStore
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings
from src.domain.ports import NotificationSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "UniVote API v1 - Register verified members and cast one vote per election",
    },
]


def build_email_sender(settings: Settings) -> NotificationSender:
    """SMTP when a host is configured, console logging otherwise."""
    if not settings.smtp_host:
        return ConsoleEmailSender()
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.mail_sender,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the store (connection pool + migrations, or in-memory)
    - Creates the registration session store and notification executor
    - Drains notifications and closes the pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        app.state.store = InMemoryStore()
    else:
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.store = None
    app.state.pool = pool

    app.state.sessions = InMemorySessionStore(idle_timeout=settings.session_idle_timeout)
    app.state.email_sender = build_email_sender(settings)
    executor = ThreadPoolExecutor(
        max_workers=settings.notification_workers, thread_name_prefix="notify"
    )
    app.state.notification_executor = executor

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    executor.shutdown(wait=True)
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="univote",
    description="UniVote API - Verified member registration and tamper-evident voting",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    """
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
