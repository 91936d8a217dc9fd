"""
Enums for embedthumbs models.
"""

from __future__ import annotations

from enum import Enum


class ProviderKind(str, Enum):
    """Embed providers whose thumbnails can be cached."""

    YOUTUBE = "youtube"


class ThumbnailTier(str, Enum):
    """YouTube thumbnail resolution tiers.

    Declared in fetch preference order, largest resolution first.
    """

    MAXRES = "maxresdefault"
    HQ = "hqdefault"
    DEFAULT = "0"
