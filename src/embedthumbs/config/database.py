"""
Database configuration and connection management.

SQLite is the default backend. SQLite connections get foreign key
enforcement switched on so that deleting a document cascades to its
metadata rows the same way it does on server databases.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from embedthumbs.config.settings import Settings, settings
from embedthumbs.db.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the async engine and hands out sessions.

    Parameters
    ----------
    app_settings : Settings | None
        Settings providing ``database_url`` and query logging flags;
        defaults to the global settings.
    """

    def __init__(self, app_settings: Settings | None = None) -> None:
        self._settings = app_settings or settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _sqlite_file(self) -> Path | None:
        """Return the database file of a file-backed SQLite URL."""
        url = make_url(self._settings.database_url)
        if url.get_backend_name() != "sqlite":
            return None
        if not url.database or url.database == ":memory:":
            return None
        return Path(url.database)

    def get_engine(self) -> AsyncEngine:
        """Get or create the async database engine."""
        if self._engine is not None:
            return self._engine

        engine_kwargs: dict[str, Any] = {
            "echo": self._settings.debug or self._settings.db_log_queries,
        }
        if not self._settings.is_sqlite:
            engine_kwargs.update({"pool_pre_ping": True, "pool_recycle": 3600})

        db_file = self._sqlite_file()
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(self._settings.database_url, **engine_kwargs)
        if self._settings.is_sqlite:
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        logger.debug("Database engine created for %s", engine.url.render_as_string())
        self._engine = engine
        return engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, committing on success and rolling back on error."""
        async with self.get_session_factory()() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose of the engine; the next call to ``get_engine`` recreates it."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
        self._session_factory = None

    async def create_tables(self) -> None:
        """Create the document and metadata tables if missing."""
        async with self.get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop every table."""
        async with self.get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


# Global database manager instance
db_manager = DatabaseManager()
