"""
Data models module for embedthumbs.

Defines Pydantic models for documents, thumbnail references and cache
reports.
"""

from __future__ import annotations

from .document import Document, DocumentBase, DocumentCreate, DocumentUpdate
from .enums import ProviderKind, ThumbnailTier
from .thumbnail import (
    META_KEY_PREFIX,
    META_URL_SUFFIX,
    CacheStats,
    OEmbedResponse,
    PruneResult,
    ThumbnailData,
    ThumbnailRecord,
    ThumbnailReference,
    build_filename,
    is_url_key,
    meta_key,
)

__all__ = [
    "Document",
    "DocumentBase",
    "DocumentCreate",
    "DocumentUpdate",
    "ProviderKind",
    "ThumbnailTier",
    "META_KEY_PREFIX",
    "META_URL_SUFFIX",
    "CacheStats",
    "OEmbedResponse",
    "PruneResult",
    "ThumbnailData",
    "ThumbnailRecord",
    "ThumbnailReference",
    "build_filename",
    "is_url_key",
    "meta_key",
]
