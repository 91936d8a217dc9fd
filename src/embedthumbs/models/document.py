"""
Document models.

Pydantic models for creating, updating and reading host documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentBase(BaseModel):
    """Base model for document data."""

    title: str = Field(default="", max_length=255)
    content: str = Field(default="", description="Document body, may contain embeds")

    model_config = ConfigDict(validate_assignment=True)


class DocumentCreate(DocumentBase):
    """Model for creating documents."""


class DocumentUpdate(BaseModel):
    """Model for updating documents (PATCH-style, all fields optional)."""

    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None


class Document(DocumentBase):
    """Full document model with identifier and timestamps."""

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
