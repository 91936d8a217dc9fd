"""
Thumbnail cache lifecycle wiring.

Connects the thumbnail cache to the host's document lifecycle hooks. The
whole subsystem stays inert unless ``download_thumbnails`` is enabled;
disabling it later leaves existing cache files in place.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.config.settings import Settings, settings
from embedthumbs.hooks import (
    BEFORE_DELETE_DOCUMENT,
    DOCUMENT_UPDATED,
    OEMBED_DATAPARSE,
    HookRegistry,
)
from embedthumbs.models.document import Document
from embedthumbs.models.thumbnail import OEmbedResponse
from embedthumbs.services.thumbnail_cache import ThumbnailCacheService

logger = logging.getLogger(__name__)


class ThumbnailHooks:
    """Registers thumbnail cache callbacks on a hook registry.

    Parameters
    ----------
    service : ThumbnailCacheService
        The cache service receiving lifecycle events.
    registry : HookRegistry
        Host hook registry.
    app_settings : Settings | None
        Settings carrying the ``download_thumbnails`` switch.
    """

    def __init__(
        self,
        service: ThumbnailCacheService,
        registry: HookRegistry,
        app_settings: Settings | None = None,
    ) -> None:
        self._service = service
        self._registry = registry
        self._settings = app_settings or settings

    def init(self) -> bool:
        """Register callbacks if thumbnail downloads are enabled.

        Returns
        -------
        bool
            ``True`` if callbacks were registered.
        """
        if not self._settings.download_thumbnails:
            logger.debug("Thumbnail downloads disabled; no hooks registered")
            return False

        self._registry.add_action(BEFORE_DELETE_DOCUMENT, self.on_before_delete)
        self._registry.add_action(DOCUMENT_UPDATED, self.on_document_updated)
        self._registry.add_filter(OEMBED_DATAPARSE, self.on_oembed_dataparse)
        return True

    async def on_before_delete(self, session: AsyncSession, document_id: int) -> None:
        await self._service.delete_thumbnails(session, document_id)

    async def on_document_updated(
        self, session: AsyncSession, document_id: int, document: Document
    ) -> None:
        await self._service.check_orphaned(session, document_id, document.content)

    async def on_oembed_dataparse(
        self,
        html: str,
        session: AsyncSession,
        data: OEmbedResponse,
        url: str,
        document_id: int,
    ) -> str:
        return await self._service.get_from_provider(
            session, html, data, url, document_id
        )
