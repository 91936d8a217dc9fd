"""
embedthumbs - Local thumbnail cache for embedded media.

Fetches provider thumbnails for embeds inside documents, stores them in a
local cache directory, and reclaims files once no document references them.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "embedthumbs"
__license__ = "GPL-2.0-or-later"

__all__ = ["__version__", "__author__", "__license__"]
