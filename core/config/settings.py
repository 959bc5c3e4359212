"""Core configuration settings using Pydantic BaseSettings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="user-api", description="Service name")
    app_version: str = Field(default="1.0.0", description="Service version")
    environment: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    api_v1_prefix: str = Field(default="/api/v1", description="Versioned API prefix")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Database connection URL (async driver)",
    )
    database_echo: bool = Field(default=False, description="Log SQL statements")

    # Authentication
    jwt_secret_key: str = Field(
        default="change-this-to-a-random-secret-key-in-production",
        description="JWT secret key for signing tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    access_token_expire_minutes: int = Field(
        default=60, description="Access token lifetime in minutes"
    )

    # Count cache
    count_cache_ttl_seconds: int = Field(
        default=60,
        description="How long user counts are served from cache",
    )
    count_cache_max_size: int = Field(
        default=10,
        description="Maximum number of cached count entries",
    )

    # Pagination
    default_page_size: int = Field(default=10, description="Default page size")
    max_page_size: int = Field(default=100, description="Largest accepted page size")

    # Prometheus Metrics
    metrics_enabled: bool = Field(
        default=True, description="Expose the Prometheus scrape endpoint"
    )

    @property
    def auth_prefix(self) -> str:
        """Path prefix of the open authentication routes."""
        return f"{self.api_v1_prefix}/auth"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
