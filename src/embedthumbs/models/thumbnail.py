"""
Thumbnail models.

Defines Pydantic models for thumbnail references stored in document
metadata, resolved thumbnail locations, oEmbed provider responses and
cache maintenance reports.
"""

from __future__ import annotations

from collections.abc import Container
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import ProviderKind, ThumbnailTier

# Metadata keys owned by the thumbnail cache start with this prefix.
META_KEY_PREFIX = "embed_privacy_thumbnail_"

# Companion key suffix holding the source embed URL.
META_URL_SUFFIX = "_url"


def meta_key(provider: ProviderKind, external_id: str) -> str:
    """Build the metadata key holding a thumbnail filename."""
    return f"{META_KEY_PREFIX}{provider.value}_{external_id}"


def is_url_key(key: str, keys: Container[str]) -> bool:
    """Check whether *key* is the ``_url`` companion of another key in *keys*.

    External ids may themselves end in ``_url``, so the suffix alone does
    not identify a companion key; its filename key must be present too.
    """
    return key.endswith(META_URL_SUFFIX) and key[: -len(META_URL_SUFFIX)] in keys


class ThumbnailRecord(BaseModel):
    """A document's reference to a cached thumbnail file."""

    document_id: int = Field(..., description="Owning document")
    provider_kind: ProviderKind = Field(default=ProviderKind.YOUTUBE)
    external_id: str = Field(..., min_length=1, description="Provider content id")
    tier: ThumbnailTier = Field(..., description="Resolution tier fetched")
    source_url: str = Field(..., description="Embed URL that produced the thumbnail")

    model_config = ConfigDict(frozen=True)

    @property
    def filename(self) -> str:
        """Deterministic cache-local file name."""
        return build_filename(self.provider_kind, self.external_id, self.tier)

    @property
    def meta_key(self) -> str:
        """Metadata key holding the filename."""
        return meta_key(self.provider_kind, self.external_id)

    @property
    def url_meta_key(self) -> str:
        """Metadata key holding the source URL."""
        return self.meta_key + META_URL_SUFFIX


def build_filename(
    provider: ProviderKind, external_id: str, tier: ThumbnailTier
) -> str:
    """Return ``<provider>-<external_id>-<tier>.jpg``."""
    return f"{provider.value}-{external_id}-{tier.value}.jpg"


class ThumbnailReference(BaseModel):
    """One row of the bulk liveness snapshot."""

    document_id: int
    filename: str

    model_config = ConfigDict(frozen=True)


class ThumbnailData(BaseModel):
    """Resolved on-disk path and public URL of a cached thumbnail.

    Both fields are empty strings when no usable thumbnail is cached.
    """

    path: str = ""
    url: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.path


class OEmbedResponse(BaseModel):
    """Subset of an oEmbed provider response used by the cache."""

    type: Optional[str] = None
    provider_name: Optional[str] = None
    title: Optional[str] = None
    html: Optional[str] = None
    thumbnail_url: Optional[str] = None
    thumbnail_width: Optional[int] = None
    thumbnail_height: Optional[int] = None

    model_config = ConfigDict(extra="allow")


class CacheStats(BaseModel):
    """Statistics about the thumbnail cache contents.

    Attributes
    ----------
    file_count : int
        Number of cached thumbnail files.
    total_size_bytes : int
        Total disk usage for all cached thumbnails.
    oldest_file : datetime | None
        Modification time of the oldest cached file.
    newest_file : datetime | None
        Modification time of the newest cached file.
    """

    file_count: int
    total_size_bytes: int
    oldest_file: datetime | None
    newest_file: datetime | None


class PruneResult(BaseModel):
    """Result of removing unreferenced cache files.

    Attributes
    ----------
    deleted : list[str]
        File names removed (or that would be removed in a dry run).
    kept : int
        Number of files still referenced by at least one document.
    bytes_freed : int
        Total size of the removed files.
    """

    deleted: list[str] = Field(default_factory=list)
    kept: int = 0
    bytes_freed: int = 0
