"""
Tests for custom exceptions module.

This module tests the exception classes, their attributes and the
inheritance hierarchy.
"""

from __future__ import annotations

import pytest

from embedthumbs.exceptions import (
    DocumentNotFoundError,
    EmbedThumbsError,
    ThumbnailCacheError,
)


class TestEmbedThumbsError:
    """Tests for base EmbedThumbsError exception."""

    def test_base_error_with_message(self) -> None:
        """Test base error stores message correctly."""
        error = EmbedThumbsError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_base_error_can_be_raised(self) -> None:
        """Test EmbedThumbsError can be raised and caught."""
        with pytest.raises(EmbedThumbsError, match="Test error"):
            raise EmbedThumbsError("Test error")


class TestThumbnailCacheError:
    """Tests for ThumbnailCacheError."""

    def test_filename_attribute(self) -> None:
        error = ThumbnailCacheError("cannot delete", filename="youtube-a-0.jpg")
        assert error.filename == "youtube-a-0.jpg"
        assert error.message == "cannot delete"

    def test_filename_defaults_to_none(self) -> None:
        assert ThumbnailCacheError("cannot delete").filename is None

    def test_inherits_from_base(self) -> None:
        assert issubclass(ThumbnailCacheError, EmbedThumbsError)


class TestDocumentNotFoundError:
    """Tests for DocumentNotFoundError."""

    def test_message_includes_id(self) -> None:
        error = DocumentNotFoundError(42)
        assert error.document_id == 42
        assert str(error) == "Document 42 not found"

    def test_caught_as_base_error(self) -> None:
        with pytest.raises(EmbedThumbsError):
            raise DocumentNotFoundError(1)
