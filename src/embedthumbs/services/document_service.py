"""
Document service.

Minimal host for documents: persists create/update/delete operations and
fires the lifecycle hooks other subsystems listen to.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.exceptions import DocumentNotFoundError
from embedthumbs.hooks import (
    BEFORE_DELETE_DOCUMENT,
    DOCUMENT_UPDATED,
    OEMBED_DATAPARSE,
    HookRegistry,
)
from embedthumbs.models.document import Document, DocumentCreate, DocumentUpdate
from embedthumbs.models.thumbnail import OEmbedResponse
from embedthumbs.repositories.document_meta_repository import DocumentMetaRepository
from embedthumbs.repositories.document_repository import DocumentRepository

logger = logging.getLogger(__name__)


class DocumentService:
    """Document lifecycle operations with hook dispatch."""

    def __init__(
        self,
        registry: HookRegistry,
        *,
        document_repository: DocumentRepository | None = None,
        meta_repository: DocumentMetaRepository | None = None,
    ) -> None:
        self._registry = registry
        self._documents = document_repository or DocumentRepository()
        self._meta = meta_repository or DocumentMetaRepository()

    async def create(self, session: AsyncSession, obj_in: DocumentCreate) -> Document:
        """Create a document."""
        db_obj = await self._documents.create(session, obj_in=obj_in)
        logger.debug("Created document %s", db_obj.id)
        return Document.model_validate(db_obj)

    async def get(self, session: AsyncSession, document_id: int) -> Document:
        """Get a document by id.

        Raises
        ------
        DocumentNotFoundError
            If no document has this id.
        """
        db_obj = await self._documents.get(session, document_id)
        if db_obj is None:
            raise DocumentNotFoundError(document_id)
        return Document.model_validate(db_obj)

    async def update(
        self, session: AsyncSession, document_id: int, obj_in: DocumentUpdate
    ) -> Document:
        """Update a document, then fire ``document_updated``."""
        db_obj = await self._documents.get(session, document_id)
        if db_obj is None:
            raise DocumentNotFoundError(document_id)

        db_obj = await self._documents.update(session, db_obj=db_obj, obj_in=obj_in)
        document = Document.model_validate(db_obj)
        await self._registry.do_action(DOCUMENT_UPDATED, session, document_id, document)
        return document

    async def delete(self, session: AsyncSession, document_id: int) -> None:
        """Fire ``before_delete_document``, then delete the document and its metadata."""
        if not await self._documents.exists(session, document_id):
            raise DocumentNotFoundError(document_id)

        await self._registry.do_action(BEFORE_DELETE_DOCUMENT, session, document_id)
        removed = await self._meta.delete_all(session, document_id)
        await self._documents.delete(session, id=document_id)
        logger.debug("Deleted document %s (%d metadata rows)", document_id, removed)

    async def render_embed(
        self,
        session: AsyncSession,
        document_id: int,
        html: str,
        data: OEmbedResponse,
        url: str,
    ) -> str:
        """Run the ``oembed_dataparse`` filter for an embed in a document."""
        return await self._registry.apply_filters(
            OEMBED_DATAPARSE, html, session, data, url, document_id
        )
