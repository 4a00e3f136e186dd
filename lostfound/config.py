"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./lostfound.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    firebase_service_account: str = Field(
        default="{}",
        description="Service account JSON used to sign push gateway access requests",
    )
    oauth_token_url: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="OAuth token endpoint, also used as the assertion audience",
    )
    fcm_base_url: str = Field(
        default="https://fcm.googleapis.com",
        description="Base URL of the push gateway HTTP v1 API",
    )
    push_concurrency_limit: int = Field(
        default=50,
        description="Number of push deliveries started together in one window",
        gt=0,
    )
    push_max_execution_seconds: float = Field(
        default=110,
        description="Wall-clock budget for the push fan-out before the remainder is skipped",
        gt=0,
    )
    push_max_retries: int = Field(
        default=3,
        description="Maximum number of retries for a single retriable push delivery",
        ge=0,
    )
    push_request_timeout_seconds: float = Field(
        default=10,
        description="Timeout applied to each outbound HTTP call",
        gt=0,
    )
    notification_insert_batch_size: int = Field(
        default=500,
        description="Rows written per bulk insert of per-user notifications",
        gt=0,
    )
    log_level: str = Field(default="INFO", description="Root logging level")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
