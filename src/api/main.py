"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance and its lifespan,
which builds the process-wide collaborators once on startup and releases
them on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.cache import InMemoryCodeStore, PostgresCodeStore
from src.adapters.repository import (
    InMemoryAccountRepository,
    PostgresAccountRepository,
    run_migrations,
)
from src.adapters.smtp.console import ConsoleNotificationSender
from src.adapters.smtp.smtp import SmtpNotificationSender
from src.adapters.tokens.signer import JwtTokenSigner
from src.api.v1 import router as v1_router
from src.config.settings import Settings, get_settings
from src.domain.passwords import PasswordHasher
from src.domain.ports import NotificationSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Forum account API v1 - Register, verify email and log in",
    },
]


def build_notification_sender(settings: Settings) -> NotificationSender:
    """Select the notification adapter configured for this process."""
    if settings.notification_backend == "smtp":
        return SmtpNotificationSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            from_address=settings.smtp_from,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleNotificationSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations (postgres backend)
    - Builds repository, code store, notification sender, hasher and signer
    - Closes connection pool on shutdown
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    logger.info("Starting application...")

    pool: ConnectionPool | None = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)

        app.state.repository = PostgresAccountRepository(pool)
        app.state.code_store = PostgresCodeStore(pool)
    else:
        logger.warning("Using in-memory storage; data is lost on restart")
        app.state.repository = InMemoryAccountRepository()
        app.state.code_store = InMemoryCodeStore()

    app.state.notification_sender = build_notification_sender(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_cost)
    app.state.token_signer = JwtTokenSigner(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )
    app.state.code_ttl_seconds = settings.code_ttl_seconds

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="forum-accounts",
    description="Forum account API - Registration, email verification and login",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with storage validation.

    Returns 200 OK if application and storage are healthy.
    Raises exception if the storage ping fails.
    """
    request.app.state.repository.ping()
    return {"status": "healthy"}
