"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresAccountRepository, run_migrations
from src.adapters.smtp.background import BackgroundEmailSender
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.smtp import SmtpEmailSender
from src.api.auth import router as auth_router
from src.api.dependencies import build_account_service
from src.api.errors import setup_exception_handlers
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Account registration, email verification, login and password management",
    },
]


def build_email_sender(settings: Settings) -> BackgroundEmailSender:
    """Create the configured email backend behind a background queue."""
    if settings.email_backend == "smtp":
        sender = SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_sender,
            username=settings.smtp_username,
            password=settings.smtp_password,
            timeout=settings.smtp_timeout_seconds,
        )
    else:
        sender = ConsoleEmailSender()
    return BackgroundEmailSender(sender, max_workers=settings.email_workers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Builds the lifecycle service with its email queue
    - Drains the email queue and closes the pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    repository = PostgresAccountRepository(pool)
    email_sender = build_email_sender(settings)

    # Stored in app state for dependency injection
    app.state.pool = pool
    app.state.repository = repository
    app.state.email_sender = email_sender
    app.state.account_service = build_account_service(settings, repository, email_sender)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    email_sender.shutdown(wait=True)
    pool.close()
    logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create the application with routes and error handling."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title="jobtrackr-auth",
        description="Jobtrackr account API - Registration, email verification, "
        "login lockout and password reset",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    setup_exception_handlers(application)
    application.include_router(auth_router, prefix="/api/auth")

    @application.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        """
        request.app.state.repository.ping()
        return {"status": "healthy"}

    return application


app = create_app()
