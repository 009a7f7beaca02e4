"""Application settings and configuration.

This module defines all configuration options for the Remark42 MongoDB
backend. Settings are loaded from environment variables with sensible
defaults. A single instance is created by the entry points and handed to the
components that need it; nothing below the entry points reads it globally.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BODY_LIMIT_BYTES = 8 * 1024 * 1024


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="remark42-mongodb", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # HTTP server
    host: str = Field(default="localhost", alias="HOST")
    port: int = Field(default=9000, alias="PORT")
    body_limit_bytes: int = Field(default=DEFAULT_BODY_LIMIT_BYTES, alias="BODY_LIMIT_BYTES")

    # Database configuration
    database_url: str = Field(
        default="mongodb://localhost:27017/remark42-mongodb",
        alias="DATABASE_URL",
    )
    avatars_bucket: str | None = Field(default=None, alias="AVATARS_BUCKET")

    # Comment behaviour
    dynamic_posts: bool = Field(default=True, alias="DYNAMIC_POSTS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("avatars_bucket")
    @classmethod
    def _blank_bucket_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def has_avatars(self) -> bool:
        """Return True when avatars are stored in a GridFS bucket."""
        return self.avatars_bucket is not None


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    return Settings()
