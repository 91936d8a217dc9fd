"""
Embed provider matchers.

Each provider answers two questions about a URL: whether it belongs to the
provider, and which external content id it refers to. The id is read from
two different sources with two different rules:

- the original embed URL (used when resolving a cached thumbnail), and
- the thumbnail URL returned by the provider's oEmbed endpoint (used when
  acquiring a thumbnail).

The two rules are kept separate on purpose; an embed URL form that the
resolve rule does not understand simply resolves to no thumbnail.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from urllib.parse import urlsplit

from embedthumbs.models.enums import ProviderKind, ThumbnailTier
from embedthumbs.models.thumbnail import META_KEY_PREFIX

_ID_TERMINATORS = re.compile(r"[&?#]")
_VALID_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class ProviderMatcher(ABC):
    """Recognizes one embed provider and extracts its content ids."""

    kind: ProviderKind

    @abstractmethod
    def matches(self, url: str) -> bool:
        """Return ``True`` if *url* belongs to this provider."""

    @abstractmethod
    def id_from_embed_url(self, url: str) -> str | None:
        """Extract the external id from an original embed URL."""

    @abstractmethod
    def id_from_thumbnail_url(self, thumbnail_url: str) -> str | None:
        """Extract the external id from a provider-returned thumbnail URL."""

    @abstractmethod
    def candidate_urls(self, external_id: str) -> list[tuple[ThumbnailTier, str]]:
        """Remote thumbnail URLs to try, in preference order."""

    def is_referenced_in(self, content: str, external_id: str) -> bool:
        """Return ``True`` if *content* still embeds *external_id*.

        Providers without a reliable textual id form never claim a match.
        """
        return False

    @property
    def meta_key_prefix(self) -> str:
        """Metadata key prefix of this provider's filename entries."""
        return f"{META_KEY_PREFIX}{self.kind.value}_"


class YouTubeProvider(ProviderMatcher):
    """Matcher for YouTube video embeds."""

    kind = ProviderKind.YOUTUBE

    HOSTS = ("youtube.com", "youtu.be")
    EMBED_PREFIXES = ("https://www.youtube.com/watch?v=", "https://youtu.be/")
    THUMBNAIL_PREFIX = "https://i.ytimg.com/vi/"
    # see: https://stackoverflow.com/a/2068371
    IMAGE_URL = "https://img.youtube.com/vi/{id}/{tier}.jpg"
    TIERS = (ThumbnailTier.MAXRES, ThumbnailTier.HQ, ThumbnailTier.DEFAULT)

    def matches(self, url: str) -> bool:
        host = (urlsplit(url).hostname or "").lower()
        return any(host == h or host.endswith("." + h) for h in self.HOSTS)

    def id_from_embed_url(self, url: str) -> str | None:
        for prefix in self.EMBED_PREFIXES:
            if url.startswith(prefix):
                remainder = url[len(prefix) :]
                break
        else:
            return None

        external_id = _ID_TERMINATORS.split(remainder, maxsplit=1)[0]
        return external_id if _VALID_ID.match(external_id) else None

    def id_from_thumbnail_url(self, thumbnail_url: str) -> str | None:
        # format: <prefix><id>/<thumbnail-name>.jpg
        if not thumbnail_url.startswith(self.THUMBNAIL_PREFIX):
            return None
        external_id = thumbnail_url[len(self.THUMBNAIL_PREFIX) :].split("/")[0]
        return external_id if _VALID_ID.match(external_id) else None

    def candidate_urls(self, external_id: str) -> list[tuple[ThumbnailTier, str]]:
        return [
            (tier, self.IMAGE_URL.format(id=external_id, tier=tier.value))
            for tier in self.TIERS
        ]

    def is_referenced_in(self, content: str, external_id: str) -> bool:
        return external_id in content


# Registered providers, checked in order.
PROVIDERS: tuple[ProviderMatcher, ...] = (YouTubeProvider(),)


def get_provider(url: str) -> ProviderMatcher | None:
    """Return the provider that claims *url*, if any."""
    for provider in PROVIDERS:
        if provider.matches(url):
            return provider
    return None


def parse_meta_key(key: str) -> tuple[ProviderMatcher, str] | None:
    """Split a thumbnail filename key into its provider and external id.

    Returns ``None`` for keys that do not belong to a registered provider.
    """
    for provider in PROVIDERS:
        prefix = provider.meta_key_prefix
        if key.startswith(prefix) and len(key) > len(prefix):
            return provider, key[len(prefix) :]
    return None
