"""
Database session management with async SQLAlchemy.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from marketing_api.config import Settings

_UNIQUE_VIOLATION_SQLSTATE = "23505"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class UniqueViolationError(Exception):
    """Raised by repositories when an insert hits a unique constraint."""

    def __init__(self, constraint: str | None = None) -> None:
        super().__init__(f"Unique constraint violated: {constraint or 'unknown'}")
        self.constraint = constraint


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell unique-constraint failures apart from other integrity errors.

    asyncpg exposes the SQLSTATE on the wrapped driver exception; SQLite only
    reports it in the message text.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, settings: Settings) -> None:
        """Initialize database manager.

        Args:
            settings: Application settings with the connection URL and pool sizing.
        """
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        url = self._settings.database_url
        options: dict[str, Any] = {"echo": self._settings.debug, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            return options
        options["pool_size"] = self._settings.database_pool_size
        options["max_overflow"] = self._settings.database_max_overflow
        timeout = self._settings.database_command_timeout_seconds
        if timeout is not None and "+asyncpg" in url:
            options["connect_args"] = {"command_timeout": timeout}
        return options

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._settings.database_url,
                **self._engine_options(),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Create a new database session context.

        Commits when the block exits cleanly, rolls back otherwise.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    async def init_models(self) -> None:
        """Create all tables. Intended for development and tests."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close the database engine."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    db_manager: DatabaseManager = request.app.state.db
    async with db_manager.session() as session:
        yield session


__all__ = [
    "Base",
    "DatabaseManager",
    "UniqueViolationError",
    "get_db_session",
    "is_unique_violation",
]
