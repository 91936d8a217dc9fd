"""
Database models for embedthumbs.

Documents and their per-document key/value metadata. Thumbnail references
are stored as metadata rows rather than in a dedicated table.
"""

from __future__ import annotations

import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Document(Base):
    """Authored document whose content may embed remote media."""

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Timestamps
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    meta: Mapped[list["DocumentMeta"]] = relationship(
        "DocumentMeta",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DocumentMeta(Base):
    """Key/value metadata attached to a document."""

    __tablename__ = "document_meta"
    __table_args__ = (Index("ix_document_meta_document_key", "document_id", "meta_key"),)

    meta_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    meta_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    meta_value: Mapped[Optional[str]] = mapped_column(Text)

    document: Mapped["Document"] = relationship("Document", back_populates="meta")
