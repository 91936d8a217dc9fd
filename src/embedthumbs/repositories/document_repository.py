"""
Document repository.
"""

from __future__ import annotations

from embedthumbs.db.models import Document as DocumentDB
from embedthumbs.models.document import DocumentCreate, DocumentUpdate
from embedthumbs.repositories.base import BaseSQLAlchemyRepository


class DocumentRepository(
    BaseSQLAlchemyRepository[DocumentDB, DocumentCreate, DocumentUpdate]
):
    """Repository for host documents."""

    def __init__(self) -> None:
        super().__init__(DocumentDB)
