"""
Runtime configuration helpers for the BuzzTalks service.

Loads DATABASE_URL and the media upload settings from the environment, falling
back to the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required; must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="BuzzTalks", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")
    log_level: str = Field(default="info", alias="LOG_LEVEL")

    # Feed behaviour
    story_ttl_hours: int = Field(default=24, alias="STORY_TTL_HOURS")
    notifications_limit: int = Field(default=50, alias="NOTIFICATIONS_LIMIT")
    search_limit: int = Field(default=10, alias="SEARCH_LIMIT")
    suggestions_limit: int = Field(default=5, alias="SUGGESTIONS_LIMIT")

    # Media hosting (Cloudinary compatible unsigned uploads)
    media_upload_base_url: str = Field(default="https://api.cloudinary.com/v1_1", alias="MEDIA_UPLOAD_BASE_URL")
    media_cloud_name: str | None = Field(default=None, alias="MEDIA_CLOUD_NAME")
    media_upload_preset: str | None = Field(default=None, alias="MEDIA_UPLOAD_PRESET")
    media_upload_timeout: float = Field(default=60.0, alias="MEDIA_UPLOAD_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
