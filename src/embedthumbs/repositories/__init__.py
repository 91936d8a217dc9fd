"""
Repository layer for documents and their metadata.
"""

from .base import BaseSQLAlchemyRepository
from .document_meta_repository import DocumentMetaRepository
from .document_repository import DocumentRepository

__all__ = [
    "BaseSQLAlchemyRepository",
    "DocumentMetaRepository",
    "DocumentRepository",
]
