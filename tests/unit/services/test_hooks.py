"""
Unit tests for the hook registry and the thumbnail cache lifecycle wiring.

The end-to-end tests drive the cache through DocumentService, the way a
host application fires its lifecycle hooks.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.config.settings import Settings
from embedthumbs.exceptions import DocumentNotFoundError
from embedthumbs.hooks import (
    BEFORE_DELETE_DOCUMENT,
    DOCUMENT_UPDATED,
    OEMBED_DATAPARSE,
    HookRegistry,
)
from embedthumbs.models.document import DocumentCreate, DocumentUpdate
from embedthumbs.repositories.document_meta_repository import DocumentMetaRepository
from embedthumbs.services.document_service import DocumentService
from embedthumbs.services.fetcher import ThumbnailFetcher
from embedthumbs.services.hooks import ThumbnailHooks
from embedthumbs.services.thumbnail_cache import (
    ThumbnailCacheConfig,
    ThumbnailCacheService,
)
from tests.factories.document_factory import OEmbedResponseFactory

pytestmark = pytest.mark.asyncio

VALID_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 2048
EMBED_HTML = '<iframe src="https://www.youtube.com/embed/abc123"></iframe>'


@pytest.fixture
def registry() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def fetcher(thumbnail_cache_config: ThumbnailCacheConfig) -> AsyncMock:
    cache_dir = thumbnail_cache_config.cache_dir
    fetcher = AsyncMock(spec=ThumbnailFetcher)

    async def download(url: str) -> tuple[Path | None, str | None]:
        tmp_file = cache_dir / f".{uuid4()}.tmp"
        tmp_file.write_bytes(VALID_JPEG)
        return tmp_file, None

    fetcher.download.side_effect = download
    return fetcher


@pytest.fixture
def cache_service(
    thumbnail_cache_config: ThumbnailCacheConfig, fetcher: AsyncMock
) -> ThumbnailCacheService:
    return ThumbnailCacheService(config=thumbnail_cache_config, fetcher=fetcher)


@pytest.fixture
def document_service(
    registry: HookRegistry,
    cache_service: ThumbnailCacheService,
    mock_settings: Settings,
) -> DocumentService:
    assert ThumbnailHooks(cache_service, registry, mock_settings).init() is True
    return DocumentService(registry)


class TestHookRegistry:
    """Tests for action and filter dispatch."""

    async def test_actions_run_in_registration_order(
        self, registry: HookRegistry
    ) -> None:
        calls: list[str] = []

        async def first(value: int) -> None:
            calls.append(f"first:{value}")

        async def second(value: int) -> None:
            calls.append(f"second:{value}")

        registry.add_action("saved", first)
        registry.add_action("saved", second)
        await registry.do_action("saved", 7)

        assert calls == ["first:7", "second:7"]

    async def test_unknown_action_is_noop(self, registry: HookRegistry) -> None:
        await registry.do_action("nothing_registered", 1)

        assert registry.has_hook("nothing_registered") is False

    async def test_filters_chain_values(self, registry: HookRegistry) -> None:
        async def wrap(value: str, tag: str) -> str:
            return f"<{tag}>{value}</{tag}>"

        async def upper(value: str, tag: str) -> str:
            return value.upper()

        registry.add_filter("render", wrap)
        registry.add_filter("render", upper)

        assert await registry.apply_filters("render", "hi", "b") == "<B>HI</B>"
        assert registry.has_hook("render") is True

    async def test_filter_without_callbacks_returns_value(
        self, registry: HookRegistry
    ) -> None:
        assert await registry.apply_filters("render", "unchanged") == "unchanged"


class TestThumbnailHooks:
    """Tests for the download_thumbnails gate."""

    def test_disabled_registers_nothing(
        self,
        registry: HookRegistry,
        cache_service: ThumbnailCacheService,
        mock_settings: Settings,
    ) -> None:
        disabled = mock_settings.model_copy(update={"download_thumbnails": False})

        assert ThumbnailHooks(cache_service, registry, disabled).init() is False
        assert registry.has_hook(BEFORE_DELETE_DOCUMENT) is False
        assert registry.has_hook(DOCUMENT_UPDATED) is False
        assert registry.has_hook(OEMBED_DATAPARSE) is False

    def test_enabled_registers_all_hooks(
        self,
        registry: HookRegistry,
        cache_service: ThumbnailCacheService,
        mock_settings: Settings,
    ) -> None:
        assert ThumbnailHooks(cache_service, registry, mock_settings).init() is True
        assert registry.has_hook(BEFORE_DELETE_DOCUMENT) is True
        assert registry.has_hook(DOCUMENT_UPDATED) is True
        assert registry.has_hook(OEMBED_DATAPARSE) is True

    async def test_disabled_render_does_not_fetch(
        self,
        registry: HookRegistry,
        cache_service: ThumbnailCacheService,
        fetcher: AsyncMock,
        mock_settings: Settings,
        db_session: AsyncSession,
    ) -> None:
        disabled = mock_settings.model_copy(update={"download_thumbnails": False})
        ThumbnailHooks(cache_service, registry, disabled).init()
        service = DocumentService(registry)
        document = await service.create(
            db_session, DocumentCreate(title="Post", content="https://youtu.be/abc123")
        )

        html = await service.render_embed(
            db_session,
            document.id,
            EMBED_HTML,
            OEmbedResponseFactory(video_id="abc123"),
            "https://youtu.be/abc123",
        )

        assert html == EMBED_HTML
        fetcher.download.assert_not_awaited()


class TestDocumentLifecycle:
    """End-to-end reference counting driven by document lifecycle hooks."""

    async def test_render_caches_thumbnail(
        self,
        document_service: DocumentService,
        cache_service: ThumbnailCacheService,
        db_session: AsyncSession,
    ) -> None:
        document = await document_service.create(
            db_session, DocumentCreate(title="Post", content="https://youtu.be/abc123")
        )

        html = await document_service.render_embed(
            db_session,
            document.id,
            EMBED_HTML,
            OEmbedResponseFactory(video_id="abc123"),
            "https://youtu.be/abc123",
        )

        assert html == EMBED_HTML
        data = await cache_service.resolve(
            db_session, document.id, "https://youtu.be/abc123"
        )
        assert Path(data.path).name == "youtube-abc123-maxresdefault.jpg"

    async def test_shared_thumbnail_deleted_with_last_document(
        self,
        document_service: DocumentService,
        cache_service: ThumbnailCacheService,
        db_session: AsyncSession,
    ) -> None:
        url = "https://youtu.be/abc123"
        cached = cache_service.cache_dir / "youtube-abc123-maxresdefault.jpg"
        doc1 = await document_service.create(
            db_session, DocumentCreate(title="One", content=url)
        )
        doc2 = await document_service.create(
            db_session, DocumentCreate(title="Two", content=url)
        )
        for document in (doc1, doc2):
            await document_service.render_embed(
                db_session,
                document.id,
                EMBED_HTML,
                OEmbedResponseFactory(video_id="abc123"),
                url,
            )

        await document_service.delete(db_session, doc1.id)

        assert cached.exists()
        assert not (await cache_service.resolve(db_session, doc2.id, url)).is_empty

        await document_service.delete(db_session, doc2.id)

        assert not cached.exists()
        meta = DocumentMetaRepository()
        assert await meta.get_thumbnail_references(db_session) == []

    async def test_update_removing_embed_reclaims(
        self,
        document_service: DocumentService,
        cache_service: ThumbnailCacheService,
        db_session: AsyncSession,
    ) -> None:
        url = "https://youtu.be/abc123"
        cached = cache_service.cache_dir / "youtube-abc123-maxresdefault.jpg"
        document = await document_service.create(
            db_session, DocumentCreate(title="Post", content=url)
        )
        await document_service.render_embed(
            db_session,
            document.id,
            EMBED_HTML,
            OEmbedResponseFactory(video_id="abc123"),
            url,
        )

        await document_service.update(
            db_session, document.id, DocumentUpdate(title="Retitled")
        )
        assert cached.exists()

        await document_service.update(
            db_session, document.id, DocumentUpdate(content="No video any more.")
        )
        assert not cached.exists()

    async def test_missing_document(
        self,
        document_service: DocumentService,
        db_session: AsyncSession,
    ) -> None:
        with pytest.raises(DocumentNotFoundError):
            await document_service.delete(db_session, 404)

        with pytest.raises(DocumentNotFoundError):
            await document_service.update(
                db_session, 404, DocumentUpdate(content="x")
            )
