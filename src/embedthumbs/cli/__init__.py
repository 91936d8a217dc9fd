"""
CLI interface module for embedthumbs.

Provides Typer-based command-line interface for inspecting and maintaining
the thumbnail cache.
"""

from __future__ import annotations

__all__: list[str] = []
