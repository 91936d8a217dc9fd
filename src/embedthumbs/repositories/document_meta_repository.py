"""
Document metadata repository.

Generic per-document key/value store. A key may hold several rows, so
``get_all`` returns every value wrapped in a list; callers that expect a
single value unwrap the first element.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, delete, not_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.db.models import DocumentMeta as DocumentMetaDB
from embedthumbs.models.thumbnail import META_KEY_PREFIX, ThumbnailReference


class DocumentMetaRepository:
    """Repository for document metadata rows."""

    async def get(
        self, session: AsyncSession, document_id: int, key: str
    ) -> Optional[str]:
        """Get the first value stored under *key* for a document."""
        result = await session.execute(
            select(DocumentMetaDB.meta_value)
            .where(
                and_(
                    DocumentMetaDB.document_id == document_id,
                    DocumentMetaDB.meta_key == key,
                )
            )
            .order_by(DocumentMetaDB.meta_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_all(
        self, session: AsyncSession, document_id: int
    ) -> dict[str, list[str]]:
        """Get every metadata entry of a document, values wrapped in lists."""
        result = await session.execute(
            select(DocumentMetaDB.meta_key, DocumentMetaDB.meta_value)
            .where(DocumentMetaDB.document_id == document_id)
            .order_by(DocumentMetaDB.meta_id)
        )
        metadata: dict[str, list[str]] = {}
        for key, value in result.all():
            metadata.setdefault(key, []).append(value if value is not None else "")
        return metadata

    async def update(
        self, session: AsyncSession, document_id: int, key: str, value: str
    ) -> None:
        """Set *key* to *value*, inserting the row if it does not exist."""
        result = await session.execute(
            update(DocumentMetaDB)
            .where(
                and_(
                    DocumentMetaDB.document_id == document_id,
                    DocumentMetaDB.meta_key == key,
                )
            )
            .values(meta_value=value)
        )
        if result.rowcount == 0:
            session.add(
                DocumentMetaDB(document_id=document_id, meta_key=key, meta_value=value)
            )
        await session.flush()

    async def delete(self, session: AsyncSession, document_id: int, key: str) -> int:
        """Delete every row stored under *key* for a document.

        Returns
        -------
        int
            Number of rows removed.
        """
        result = await session.execute(
            delete(DocumentMetaDB).where(
                and_(
                    DocumentMetaDB.document_id == document_id,
                    DocumentMetaDB.meta_key == key,
                )
            )
        )
        await session.flush()
        return result.rowcount or 0

    async def delete_all(self, session: AsyncSession, document_id: int) -> int:
        """Delete every metadata row of a document."""
        result = await session.execute(
            delete(DocumentMetaDB).where(DocumentMetaDB.document_id == document_id)
        )
        await session.flush()
        return result.rowcount or 0

    async def get_thumbnail_references(
        self, session: AsyncSession
    ) -> list[ThumbnailReference]:
        """Load every (document, filename) thumbnail pair in one query.

        ``_url`` companion rows are excluded by value: they hold a URL, while
        filename rows hold a bare file name. The key suffix cannot be used
        because external ids may end in ``_url``. This snapshot is the input
        of every liveness check, so it is read once per reclaim pass.
        """
        result = await session.execute(
            select(DocumentMetaDB.document_id, DocumentMetaDB.meta_value)
            .where(
                and_(
                    DocumentMetaDB.meta_key.startswith(
                        META_KEY_PREFIX, autoescape=True
                    ),
                    DocumentMetaDB.meta_value.is_not(None),
                    not_(DocumentMetaDB.meta_value.contains("/", autoescape=True)),
                )
            )
            .distinct()
        )
        return [
            ThumbnailReference(document_id=document_id, filename=filename)
            for document_id, filename in result.all()
        ]
