"""
Database layer for embedthumbs.
"""

from __future__ import annotations

from .models import Base, Document, DocumentMeta

__all__ = ["Base", "Document", "DocumentMeta"]
