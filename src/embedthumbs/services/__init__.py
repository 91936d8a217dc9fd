"""
Services module for embedthumbs.

Contains the thumbnail cache, its provider matchers and fetcher, and the
document lifecycle wiring.
"""

from __future__ import annotations

from embedthumbs.services.document_service import DocumentService
from embedthumbs.services.fetcher import ThumbnailFetcher
from embedthumbs.services.hooks import ThumbnailHooks
from embedthumbs.services.providers import ProviderMatcher, YouTubeProvider
from embedthumbs.services.thumbnail_cache import (
    ThumbnailCacheConfig,
    ThumbnailCacheService,
)

__all__: list[str] = [
    "DocumentService",
    "ProviderMatcher",
    "ThumbnailCacheConfig",
    "ThumbnailCacheService",
    "ThumbnailFetcher",
    "ThumbnailHooks",
    "YouTubeProvider",
]
