"""
Thumbnail cache service for embedded media.

Fetches provider thumbnails the first time an embed is parsed, records a
reference to the cached file in the owning document's metadata, resolves
cached thumbnails for rendering, and reclaims files once no document
references them any more.

Several documents may reference the same physical file. Reclaim therefore
loads one snapshot of every thumbnail reference and only deletes a file
when no *other* document points at the same filename.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.config.settings import Settings
from embedthumbs.exceptions import ThumbnailCacheError
from embedthumbs.models.thumbnail import (
    META_KEY_PREFIX,
    META_URL_SUFFIX,
    CacheStats,
    OEmbedResponse,
    PruneResult,
    ThumbnailData,
    ThumbnailRecord,
    ThumbnailReference,
    is_url_key,
    meta_key,
)
from embedthumbs.repositories.document_meta_repository import DocumentMetaRepository
from embedthumbs.repositories.document_repository import DocumentRepository
from embedthumbs.services.fetcher import ThumbnailFetcher
from embedthumbs.services.providers import get_provider, parse_meta_key

logger = logging.getLogger(__name__)


class ThumbnailCacheConfig(BaseModel):
    """Configuration for the thumbnail cache.

    Attributes
    ----------
    cache_dir : Path
        Flat directory holding ``<provider>-<id>-<tier>.jpg`` files.
    install_root : Path
        Site root; public URLs are built from paths relative to it.
    public_base_url : str
        Public base URL of the site, without trailing slash.
    fetch_timeout : float
        HTTP timeout in seconds for a single thumbnail fetch.
    """

    cache_dir: Path
    install_root: Path
    public_base_url: str
    fetch_timeout: float = 10.0

    @classmethod
    def from_settings(cls, app_settings: Settings) -> ThumbnailCacheConfig:
        """Build the cache configuration from application settings."""
        return cls(
            cache_dir=app_settings.cache_dir,
            install_root=app_settings.install_root,
            public_base_url=app_settings.public_base_url,
            fetch_timeout=app_settings.fetch_timeout,
        )


class ThumbnailCacheService:
    """Reference-counted local cache of embed thumbnails.

    Parameters
    ----------
    config : ThumbnailCacheConfig
        Cache directory, public URL settings and fetch timeout.
    fetcher : ThumbnailFetcher | None
        Remote fetcher; defaults to one writing temporary files into the
        cache directory.
    document_repository : DocumentRepository | None
        Document lookup used to ignore fetches for unknown documents.
    meta_repository : DocumentMetaRepository | None
        Per-document metadata store holding the thumbnail references.
    """

    def __init__(
        self,
        config: ThumbnailCacheConfig,
        *,
        fetcher: ThumbnailFetcher | None = None,
        document_repository: DocumentRepository | None = None,
        meta_repository: DocumentMetaRepository | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher or ThumbnailFetcher(
            tmp_dir=config.cache_dir, timeout=config.fetch_timeout
        )
        self._documents = document_repository or DocumentRepository()
        self._meta = meta_repository or DocumentMetaRepository()
        self._passthrough = False
        self.ensure_directories()

    @property
    def cache_dir(self) -> Path:
        return self._config.cache_dir

    # ------------------------------------------------------------------
    # Directory management
    # ------------------------------------------------------------------

    def ensure_directories(self) -> None:
        """Create the cache directory if it does not exist.

        If directory creation fails, the service falls back to passthrough
        mode where nothing is fetched and nothing resolves.
        """
        try:
            self._config.cache_dir.mkdir(parents=True, exist_ok=True)
            logger.debug("Thumbnail cache directory ready: %s", self._config.cache_dir)
        except OSError:
            logger.error(
                "Failed to create thumbnail cache directory; "
                "falling back to passthrough mode",
                exc_info=True,
            )
            self._passthrough = True

    def _cache_path(self, filename: str) -> Path | None:
        """Return the on-disk path for *filename*, or ``None`` if unsafe."""
        if not filename or Path(filename).name != filename:
            logger.warning("Ignoring invalid thumbnail filename: %r", filename)
            return None
        return self._config.cache_dir / filename

    # ------------------------------------------------------------------
    # Acquire
    # ------------------------------------------------------------------

    async def get_from_provider(
        self,
        session: AsyncSession,
        html: str,
        data: OEmbedResponse,
        url: str,
        document_id: int,
    ) -> str:
        """Acquire the thumbnail of a freshly parsed oEmbed response.

        Runs as a filter on the parsed oEmbed HTML, which is returned
        unchanged.
        """
        if data.thumbnail_url and get_provider(url) is not None:
            await self.acquire(session, document_id, url, data.thumbnail_url)
        return html

    async def acquire(
        self,
        session: AsyncSession,
        document_id: int,
        embed_url: str,
        thumbnail_url: str,
    ) -> ThumbnailRecord | None:
        """Download a thumbnail and record it on the document.

        The external id is read from *thumbnail_url* (the URL returned by
        the provider), not from *embed_url*. Resolution tiers are tried in
        the provider's preference order; the first successful fetch is
        moved into the cache and two metadata entries are written. When
        every tier fails nothing is written.

        Parameters
        ----------
        session : AsyncSession
            Database session for document lookup and metadata writes.
        document_id : int
            Owning document. Unknown documents are ignored.
        embed_url : str
            Original embed URL, stored as provenance.
        thumbnail_url : str
            Thumbnail URL from the provider's oEmbed response.

        Returns
        -------
        ThumbnailRecord | None
            The stored record, or ``None`` if nothing was cached.
        """
        if self._passthrough:
            return None

        provider = get_provider(embed_url)
        if provider is None:
            return None

        external_id = provider.id_from_thumbnail_url(thumbnail_url)
        if external_id is None:
            logger.debug("No external id in thumbnail URL: %s", thumbnail_url)
            return None

        if not await self._documents.exists(session, document_id):
            logger.debug(
                "Document %s not found; skipping thumbnail %s", document_id, external_id
            )
            return None

        for tier, remote_url in provider.candidate_urls(external_id):
            tmp_path, reason = await self._fetcher.download(remote_url)
            if tmp_path is None:
                logger.debug(
                    "Tier %s unavailable for %s (%s)", tier.value, external_id, reason
                )
                continue

            record = ThumbnailRecord(
                document_id=document_id,
                provider_kind=provider.kind,
                external_id=external_id,
                tier=tier,
                source_url=embed_url,
            )
            if not self._store(tmp_path, record.filename):
                continue

            await self._meta.update(session, document_id, record.meta_key, record.filename)
            await self._meta.update(session, document_id, record.url_meta_key, embed_url)
            logger.info(
                "Cached thumbnail %s for document %s", record.filename, document_id
            )
            return record

        logger.info(
            "No thumbnail tier available for %s %s",
            provider.kind.value,
            external_id,
        )
        return None

    def _store(self, tmp_path: Path, filename: str) -> bool:
        """Move a downloaded file into the cache under *filename*."""
        cache_path = self._config.cache_dir / filename
        try:
            tmp_path.replace(cache_path)
        except OSError:
            logger.error(
                "Disk error moving thumbnail into cache at %s",
                cache_path,
                exc_info=True,
            )
            tmp_path.unlink(missing_ok=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Resolve
    # ------------------------------------------------------------------

    async def resolve(
        self,
        session: AsyncSession,
        document_id: int,
        embed_url: str,
    ) -> ThumbnailData:
        """Return the cached thumbnail path and public URL for an embed.

        The external id is read from the original *embed_url*. Both fields
        are empty unless the metadata entry exists and the file is on disk.
        Never fetches and never modifies metadata.
        """
        if self._passthrough:
            return ThumbnailData()

        provider = get_provider(embed_url)
        if provider is None:
            return ThumbnailData()

        external_id = provider.id_from_embed_url(embed_url)
        if external_id is None:
            return ThumbnailData()

        filename = await self._meta.get(
            session, document_id, meta_key(provider.kind, external_id)
        )
        if not filename:
            return ThumbnailData()

        path = self._cache_path(filename)
        if path is None or not path.is_file():
            logger.debug("Thumbnail %s missing on disk", filename)
            return ThumbnailData()

        public_url = self._public_url(path)
        if public_url is None:
            return ThumbnailData()
        return ThumbnailData(path=str(path), url=public_url)

    def _public_url(self, path: Path) -> str | None:
        """Build the public URL of a file below the install root."""
        root = self._config.install_root.resolve()
        try:
            relative = path.resolve().relative_to(root)
        except ValueError:
            logger.warning("Thumbnail %s is outside install root %s", path, root)
            return None
        return f"{self._config.public_base_url.rstrip('/')}/{relative.as_posix()}"

    # ------------------------------------------------------------------
    # Reclaim
    # ------------------------------------------------------------------

    async def delete_thumbnails(
        self, session: AsyncSession, document_id: int
    ) -> list[str]:
        """Reclaim thumbnails of a document that is about to be deleted.

        Returns
        -------
        list[str]
            Filenames whose references were released.
        """
        return await self._reclaim(session, document_id, content=None)

    async def check_orphaned(
        self, session: AsyncSession, document_id: int, content: str
    ) -> list[str]:
        """Reclaim thumbnails a just-updated document no longer embeds.

        A thumbnail whose external id still appears in *content* is kept,
        even when no other document references it.

        Returns
        -------
        list[str]
            Filenames whose references were released.
        """
        return await self._reclaim(session, document_id, content=content)

    async def _reclaim(
        self,
        session: AsyncSession,
        document_id: int,
        *,
        content: str | None,
    ) -> list[str]:
        """Shared reclaim pass; *content* is ``None`` on the delete path."""
        global_metadata = await self._meta.get_thumbnail_references(session)
        metadata = await self._meta.get_all(session, document_id)
        released: list[str] = []

        for key, value in metadata.items():
            if not key.startswith(META_KEY_PREFIX) or is_url_key(key, metadata):
                continue

            if isinstance(value, list):
                value = value[0] if value else ""
            filename = value
            if not filename or "/" in filename:
                # a source URL, not a cached file name
                continue

            if content is not None:
                parsed = parse_meta_key(key)
                if parsed is None:
                    continue
                provider, external_id = parsed
                if provider.is_referenced_in(content, external_id):
                    continue

            if self._is_in_use(filename, document_id, global_metadata):
                logger.debug(
                    "Thumbnail %s still used by another document; keeping", filename
                )
                continue

            self.delete(filename)
            await self._meta.delete(session, document_id, key)
            await self._meta.delete(session, document_id, key + META_URL_SUFFIX)
            released.append(filename)

        return released

    @staticmethod
    def _is_in_use(
        filename: str,
        document_id: int,
        global_metadata: list[ThumbnailReference],
    ) -> bool:
        """Check whether another document references *filename*."""
        return any(
            reference.filename == filename and reference.document_id != document_id
            for reference in global_metadata
        )

    def delete(self, filename: str) -> bool:
        """Delete a cached thumbnail file.

        A file that is already absent is not an error.

        Returns
        -------
        bool
            ``True`` if a file was removed.

        Raises
        ------
        ThumbnailCacheError
            If the file exists but cannot be removed.
        """
        path = self._cache_path(filename)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ThumbnailCacheError(
                f"Failed to delete cached thumbnail {filename}: {exc}",
                filename=filename,
            ) from exc
        logger.info("Deleted cached thumbnail: %s", path)
        return True

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def _cached_files(self) -> list[Path]:
        cache_dir = self._config.cache_dir
        if not cache_dir.is_dir():
            return []
        return sorted(path for path in cache_dir.glob("*.jpg") if path.is_file())

    async def get_stats(self) -> CacheStats:
        """Compute statistics about the cached thumbnail files."""
        file_count = 0
        total_size_bytes = 0
        oldest_mtime: float | None = None
        newest_mtime: float | None = None

        for path in self._cached_files():
            stat = path.stat()
            file_count += 1
            total_size_bytes += stat.st_size
            if oldest_mtime is None or stat.st_mtime < oldest_mtime:
                oldest_mtime = stat.st_mtime
            if newest_mtime is None or stat.st_mtime > newest_mtime:
                newest_mtime = stat.st_mtime

        return CacheStats(
            file_count=file_count,
            total_size_bytes=total_size_bytes,
            oldest_file=(
                datetime.fromtimestamp(oldest_mtime) if oldest_mtime is not None else None
            ),
            newest_file=(
                datetime.fromtimestamp(newest_mtime) if newest_mtime is not None else None
            ),
        )

    async def prune_unreferenced(
        self, session: AsyncSession, *, dry_run: bool = False
    ) -> PruneResult:
        """Delete cached files that no document references.

        Uses the same single-query snapshot as the reclaim pass.

        Parameters
        ----------
        session : AsyncSession
            Database session for the reference snapshot.
        dry_run : bool
            If ``True``, report what would be deleted without deleting.
        """
        referenced = {
            reference.filename
            for reference in await self._meta.get_thumbnail_references(session)
        }
        result = PruneResult()

        for path in self._cached_files():
            if path.name in referenced:
                result.kept += 1
                continue
            size = path.stat().st_size
            if not dry_run and not self.delete(path.name):
                continue
            result.deleted.append(path.name)
            result.bytes_freed += size

        logger.info(
            "Prune %s: %d unreferenced, %d kept, %d bytes",
            "dry run" if dry_run else "complete",
            len(result.deleted),
            result.kept,
            result.bytes_freed,
        )
        return result
