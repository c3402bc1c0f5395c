"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from psycopg_pool import ConnectionPool
from starlette.middleware.sessions import SessionMiddleware

from src.adapters.repository.memory import InMemoryUserRepository
from src.adapters.repository.postgres import PostgresUserRepository, run_migrations
from src.adapters.smtp.console import ConsoleMailTransport
from src.adapters.smtp.smtp import SmtpMailTransport
from src.api.auth import AuthContext
from src.api.csrf import CSRFMiddleware
from src.api.errors import register_error_handlers
from src.api.users import router as users_router
from src.config.settings import Settings, get_settings
from src.domain.authentication import Authenticator
from src.domain.email import EmailDispatcher
from src.domain.exceptions import RepositoryError
from src.domain.ports import MailTransport

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "users",
        "description": "Register, confirm and log in user accounts",
    },
]


def build_mail_transport(settings: Settings) -> MailTransport:
    if settings.mail_transport == "smtp":
        return SmtpMailTransport(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            starttls=settings.smtp_starttls,
            timeout=settings.smtp_timeout_seconds,
        )
    return ConsoleMailTransport()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the user store (connection pool + migrations for Postgres)
    - Builds the mail dispatcher and authentication context
    - Closes connection pool on shutdown
    """
    settings: Settings = app.state.settings
    pool: ConnectionPool | None = None

    logger.info("Starting application...")

    if settings.user_store == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        repository = PostgresUserRepository(pool)
    else:
        logger.warning("Using in-memory user store; data is lost on shutdown")
        repository = InMemoryUserRepository()

    app.state.repository = repository
    app.state.email_dispatcher = EmailDispatcher(
        transport=build_mail_transport(settings),
        sender=settings.email_user,
    )
    app.state.auth_context = AuthContext(authenticator=Authenticator(repository))

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the application for ``settings`` (environment settings by default)."""
    settings = settings or get_settings()

    app = FastAPI(
        title="regconfirm",
        description="User registration with email confirmation and session login",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_error_handlers(app)

    # Added innermost first: request log -> CORS -> session -> CSRF -> routes
    if settings.csrf_enabled:
        app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.include_router(users_router, prefix="/api/users")

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with user store validation.

        Returns 200 OK if application and store are healthy, 503 otherwise.
        """
        try:
            request.app.state.repository.ping()
        except RepositoryError:
            logger.exception("Health check failed")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="User store unavailable",
            ) from None

        return {"status": "healthy"}

    return app


app = create_app()
