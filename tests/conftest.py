"""
Pytest configuration and fixtures for embedthumbs tests.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from embedthumbs.config.settings import Settings
from embedthumbs.db.models import Base
from embedthumbs.services.thumbnail_cache import ThumbnailCacheConfig


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Settings pointing every path at the test's temporary directory."""
    site_root = tmp_path / "site"
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        download_thumbnails=True,
        install_root=site_root,
        thumbnails_dir=site_root / "content" / "uploads" / "embed-privacy" / "thumbnails",
        public_base_url="https://example.org/",
        debug=False,
        log_level="INFO",
    )


@pytest.fixture
def thumbnail_cache_config(mock_settings: Settings) -> ThumbnailCacheConfig:
    """Thumbnail cache configuration built from test settings."""
    return ThumbnailCacheConfig.from_settings(mock_settings)


@pytest.fixture
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session backed by a per-test SQLite file.

    Tables are created before the test and the engine disposed afterwards.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'session.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()

    await engine.dispose()
