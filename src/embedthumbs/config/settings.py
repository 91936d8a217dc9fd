"""
Application settings and configuration management.

Values come from ``EMBEDTHUMBS_*`` environment variables or a ``.env``
file. The thumbnail cache directory defaults to a fixed location below
the site's install root so cached files are publicly reachable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from embedthumbs import __version__

# Cache location relative to the install root.
DEFAULT_THUMBNAILS_SUBDIR = Path("content") / "uploads" / "embed-privacy" / "thumbnails"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDTHUMBS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="embedthumbs")
    app_version: str = Field(default=__version__)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./data/embedthumbs.db")
    db_log_queries: bool = Field(default=False)

    # Thumbnail cache
    download_thumbnails: bool = Field(
        default=False,
        description="Master switch; when off no thumbnail hooks are registered",
    )
    install_root: Path = Field(default=Path("./site"))
    thumbnails_dir: Optional[Path] = Field(
        default=None,
        description="Cache directory; defaults to a path below install_root",
    )
    public_base_url: str = Field(default="http://localhost:8000")
    fetch_timeout: float = Field(default=10.0, gt=0)

    @field_validator("install_root", "thumbnails_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path | None) -> Path | None:
        """Accept directory paths given as strings."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("public_base_url")
    @classmethod
    def validate_public_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"public_base_url must be an http(s) URL: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def default_thumbnails_dir(self) -> Settings:
        if self.thumbnails_dir is None:
            self.thumbnails_dir = self.install_root / DEFAULT_THUMBNAILS_SUBDIR
        return self

    @property
    def cache_dir(self) -> Path:
        """Resolved thumbnail cache directory."""
        return self.thumbnails_dir or self.install_root / DEFAULT_THUMBNAILS_SUBDIR

    @property
    def is_sqlite(self) -> bool:
        """Check if the database is SQLite."""
        return self.database_url.startswith("sqlite")


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
