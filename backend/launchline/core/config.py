"""
Application configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Launchline Core", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    app_description: str = Field(default="Launchline workspace and invitation API", alias="APP_DESCRIPTION")
    debug: bool = Field(default=False, alias="DEBUG")
    environment: str = Field(default="production", alias="ENVIRONMENT")

    # Server Settings
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Database Settings
    database_url: str = Field(alias="DATABASE_URL")
    database_pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=20, alias="DATABASE_MAX_OVERFLOW")
    database_pool_timeout: int = Field(default=30, alias="DATABASE_POOL_TIMEOUT")
    database_pool_recycle: int = Field(default=3600, alias="DATABASE_POOL_RECYCLE")

    # Redis Settings
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # Security Settings
    secret_key: str = Field(alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # CORS
    allowed_origins: list[str] = Field(default=["http://localhost:3000"], alias="ALLOWED_ORIGINS")

    # Analytics Settings
    posthog_api_key: Optional[str] = Field(default=None, alias="POSTHOG_API_KEY")
    posthog_host: str = Field(default="https://eu.i.posthog.com", alias="POSTHOG_HOST")
    posthog_disabled: bool = Field(default=False, alias="POSTHOG_DISABLED")
    graceful_shutdown_timeout_ms: int = Field(default=5000, alias="GRACEFUL_SHUTDOWN_TIMEOUT_MS")

    # Pagination Settings
    pagination_default_limit: int = Field(default=20, alias="PAGINATION_DEFAULT_LIMIT")
    pagination_max_limit: int = Field(default=100, alias="PAGINATION_MAX_LIMIT")

    # Invitation Settings
    invitation_ttl_days: int = Field(default=2, alias="INVITATION_TTL_DAYS")
    invitation_rate_limit_per_minute: int = Field(default=30, alias="INVITATION_RATE_LIMIT_PER_MINUTE")

    # Event Bus Settings
    event_bus_channel_prefix: str = Field(default="events", alias="EVENT_BUS_CHANNEL_PREFIX")
    outbox_batch_size: int = Field(default=100, alias="OUTBOX_BATCH_SIZE")
    outbox_dispatch_interval_seconds: float = Field(default=5.0, alias="OUTBOX_DISPATCH_INTERVAL_SECONDS")
    outbox_max_attempts: int = Field(default=10, alias="OUTBOX_MAX_ATTEMPTS")

    # Logging Settings
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


# Global settings instance
settings = get_settings()
