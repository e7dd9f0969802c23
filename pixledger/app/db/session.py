"""
Database session configuration.

This module defines the `Database` context that owns the async engine and the
session factory. One instance is created by the application lifespan (or by
the test suite) and handed to whoever needs it; nothing here is a module-level
connection.
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from pixledger.app.db.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite (needed for ON DELETE CASCADE)."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Explicit data-access context.

    Holds the engine and the session factory. `session()` is for plain
    request-scoped work; `unit_of_work()` is for operations that must commit
    or roll back as a single unit (transfers, direct ledger entries).
    """

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
        command_timeout: Optional[int] = None,
    ):
        engine_kwargs = {"echo": echo}
        if url.startswith("postgresql"):
            if pool_size is not None:
                engine_kwargs["pool_size"] = pool_size
            if max_overflow is not None:
                engine_kwargs["max_overflow"] = max_overflow
            if command_timeout is not None:
                engine_kwargs["connect_args"] = {"command_timeout": command_timeout}

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        if url.startswith("sqlite"):
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def session(self) -> AsyncSession:
        """Return a new session; use as `async with database.session() as s`."""
        return self.session_factory()

    def unit_of_work(self) -> UnitOfWork:
        """Return a new unit of work bound to this database."""
        return UnitOfWork(self.session_factory)

    async def create_all(self) -> None:
        """Create all tables registered on `Base`."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the app-owned `Database`."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    """
    async with get_database(request).session() as session:
        try:
            yield session
        finally:
            await session.close()
