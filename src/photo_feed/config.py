"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    photo_storage_url: str
    comment_storage_url: str
    admin_token: str
    photo_index_name: str = "photos-index.json"
    comment_index_name: str = "comments-index.json"
    photo_blob_prefix: str = "photo-"
    comment_id_floor: int = 100
    storage_timeout_seconds: float = 15
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
