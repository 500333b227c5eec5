"""Manifest configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """filemanifest settings."""

    model_config = SettingsConfigDict(
        env_prefix="FILEMANIFEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Hashing
    hash_chunk_size: int = Field(default=65536, ge=1)

    # Manifest files
    manifest_mode: int = Field(default=0o444, ge=0, le=0o7777)
    manifest_encoding: str = "utf-8"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
