"""
Custom exceptions for the embedthumbs application.

Thumbnail acquisition never raises to the caller; these exceptions cover
filesystem failures during reclaim and host-side document operations.
"""

from __future__ import annotations


class EmbedThumbsError(Exception):
    """Base exception for all embedthumbs errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize EmbedThumbsError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class ThumbnailCacheError(EmbedThumbsError):
    """
    Exception raised when a cached thumbnail file cannot be removed.

    A file that is already absent is not an error; this is raised only for
    operating system failures such as permission errors, so the caller can
    roll back the surrounding transaction.

    Attributes
    ----------
    message : str
        Human-readable error message.
    filename : str | None
        Cache-local file name involved in the failure.
    """

    def __init__(self, message: str, filename: str | None = None) -> None:
        """
        Initialize ThumbnailCacheError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        filename : str | None, optional
            Cache-local file name involved in the failure (default: None).
        """
        self.filename = filename
        super().__init__(message)


class DocumentNotFoundError(EmbedThumbsError):
    """Exception raised when a document operation targets an unknown id."""

    def __init__(self, document_id: int) -> None:
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")
