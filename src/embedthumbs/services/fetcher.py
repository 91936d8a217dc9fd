"""
Remote thumbnail fetcher.

Downloads a single remote image to a temporary file. Any response that is
not a usable image counts as a failure, including the grey placeholder
YouTube serves (with a 404 status) for resolution tiers a video lacks.
"""

from __future__ import annotations

import logging
from pathlib import Path
from uuid import uuid4

import httpx

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Maximum image size: 5 MB
# ---------------------------------------------------------------------------
_MAX_IMAGE_BYTES = 5 * 1024 * 1024

# ---------------------------------------------------------------------------
# Minimum image size: 1024 bytes (placeholder / corrupted body detection)
# ---------------------------------------------------------------------------
_MIN_IMAGE_BYTES = 1024


class ThumbnailFetcher:
    """Fetch remote images into temporary files.

    Parameters
    ----------
    tmp_dir : Path
        Directory receiving temporary downloads. Keeping it on the same
        filesystem as the cache directory makes the final rename atomic.
    timeout : float
        HTTP request timeout in seconds.
    """

    def __init__(self, tmp_dir: Path, timeout: float = 10.0) -> None:
        self._tmp_dir = tmp_dir
        self._timeout = timeout

    async def download(self, url: str) -> tuple[Path | None, str | None]:
        """Fetch *url* into a temporary file.

        Parameters
        ----------
        url : str
            Remote image URL to fetch.

        Returns
        -------
        tuple[Path | None, str | None]
            ``(tmp_path, None)`` on success, or ``(None, reason)`` on failure.
            The caller owns the temporary file and must move or remove it.
        """
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=self._timeout,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            logger.warning("Timeout fetching thumbnail: %s", url)
            return None, "timeout"
        except httpx.HTTPError as exc:
            logger.warning("HTTP error fetching thumbnail %s: %s", url, exc)
            return None, f"http_error: {exc}"

        status_code = response.status_code
        if status_code != 200:
            logger.info("Thumbnail not available (%d) at %s", status_code, url)
            return None, f"status_{status_code}"

        content_type = response.headers.get("content-type", "")
        if "image/" not in content_type:
            logger.warning("Non-image content-type '%s' from %s", content_type, url)
            return None, f"invalid_content_type: {content_type}"

        body = response.content

        if len(body) < _MIN_IMAGE_BYTES:
            logger.info("Thumbnail too small (%d bytes) from %s", len(body), url)
            return None, f"too_small_{len(body)}"

        if len(body) > _MAX_IMAGE_BYTES:
            logger.warning("Thumbnail too large (%d bytes) from %s", len(body), url)
            return None, f"too_large_{len(body)}"

        tmp_path = self._tmp_dir / f".{uuid4()}.tmp"
        try:
            self._tmp_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(body)
        except OSError:
            logger.error(
                "Disk error writing temporary thumbnail to %s",
                tmp_path,
                exc_info=True,
            )
            tmp_path.unlink(missing_ok=True)
            return None, "disk_error"

        logger.debug("Downloaded %s (%d bytes) to %s", url, len(body), tmp_path)
        return tmp_path, None
