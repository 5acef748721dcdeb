"""Configuration management for Anime Notes."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ANIMENOTES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Mode preference (local-only, anilist-only, local-anilist-synced, dual-view)
    sync_mode: str = Field(
        default="dual-view",
        description="Where notes are read from and written to",
    )

    # AniList
    anilist_token: str = Field(
        default="",
        description="AniList access token supplied by the host",
    )
    anilist_api_url: str = Field(
        default="https://graphql.anilist.co",
        description="AniList GraphQL endpoint",
    )
    anilist_timeout: Optional[float] = Field(
        default=None,
        description="Per-request timeout in seconds (default: no timeout)",
    )
    list_chunk_size: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Entries per chunk when paging the list collection",
    )

    # View
    settle_delay: float = Field(
        default=0.4,
        ge=0.0,
        le=5.0,
        description="Minimum pause in seconds before reopening a toggled view",
    )

    # Local storage
    database_path: Path = Field(
        default=Path("data/animenotes.db"),
        description="Path to SQLite database file",
    )
    storage_key: str = Field(
        default="anime-notes",
        description="Key holding the whole local note map",
    )

    @property
    def database_url(self) -> str:
        """SQLAlchemy database URL."""
        return f"sqlite:///{self.database_path}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
