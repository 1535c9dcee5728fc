"""
Configuration and settings for the parking backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Local JSON documents
    data_dir: str = Field(default="data")

    # Built front-end bundle served for non-API paths
    static_dir: Optional[str] = Field(default=None)

    # S3-compatible storage (e.g. the Supabase Storage S3 gateway)
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_bucket: Optional[str] = Field(default="parking")
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    backup_object_key: str = Field(default="backup.json")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def remote_storage_configured(self) -> bool:
        return bool(
            self.storage_endpoint
            and self.storage_bucket
            and self.aws_access_key_id
            and self.aws_secret_access_key
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
