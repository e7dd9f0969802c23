"""
FastAPI Application Entry Point.

This is the main application file for the PIX Ledger Backend.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from pixledger.app.core.config import settings
from pixledger.app.api.v1.router import router as api_v1_router
from pixledger.app.core.logging_config import setup_logging
from pixledger.app.core.observability import ObservabilityMiddleware
from pixledger.app.core.redis_client import create_redis, ping_redis
from pixledger.app.db.session import Database
from pixledger.app.domain.ledger.account_locks import AccountLockRegistry
from pixledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from pixledger.app.models.account import Account, PixKey  # noqa: F401
from pixledger.app.models.transaction import Transaction  # noqa: F401
from pixledger.app.models.expense import Expense  # noqa: F401
from pixledger.app.models.audit_log import AuditLog  # noqa: F401

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None, redis_client=None) -> FastAPI:
    """
    Build the application.

    `database` and `redis_client` are created from settings when not given;
    either way they live on `app.state` and are reached through dependencies.
    """
    setup_logging(settings.log_level, settings.db_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for application startup/shutdown.

        1. Creates database tables on startup.
        2. Disposes the engine and closes Redis on shutdown (only what it created).
        """
        owns_database = app.state.database is None
        owns_redis = app.state.redis is None
        if owns_database:
            app.state.database = Database(
                settings.database_url,
                echo=settings.db_echo,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                command_timeout=settings.db_command_timeout,
            )
        if owns_redis:
            app.state.redis = create_redis(settings)

        await app.state.database.create_all()
        logger.info("%s started", settings.app_name)
        yield

        if owns_redis:
            await app.state.redis.aclose()
        if owns_database:
            await app.state.database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        debug=settings.debug,
        description="Account ledger with PIX-key transfers",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.redis = redis_client
    app.state.account_locks = AccountLockRegistry()

    app.add_middleware(ObservabilityMiddleware)

    # Register global exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            dict: Status and application information
        """
        redis_ok = await ping_redis(request.app.state.redis)
        return {
            "status": "healthy" if redis_ok else "degraded",
            "app_name": settings.app_name,
            "version": settings.api_version,
            "redis": "up" if redis_ok else "down",
        }

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint.

        Returns:
            dict: Welcome message and API documentation links
        """
        return {
            "message": "Welcome to the PIX Ledger Backend API",
            "docs": "/docs",
            "health": "/health",
        }

    # Include API v1 router
    app.include_router(api_v1_router, prefix=f"/{settings.api_version}")

    return app


app = create_app()
