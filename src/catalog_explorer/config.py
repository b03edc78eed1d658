"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation,
type coercion, and sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogServiceConfig(BaseSettings):
    """Catalog/versioning service configuration."""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    base_url: str = Field(
        default="http://127.0.0.1:8080",
        description="Base URL of the catalog web service",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=5,
        le=120,
        description="HTTP request timeout in seconds",
    )
    diff_limit: int = Field(
        default=5000,
        ge=1,
        le=20000,
        description="Maximum number of diff items requested from the service",
    )
    lookup_max_labels: int = Field(
        default=500,
        ge=1,
        le=500,
        description="Maximum labels per diff lookup request",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base URL: {v}")
        return v.rstrip("/")


class ViewConfig(BaseSettings):
    """Default view state for result lists."""

    model_config = SettingsConfigDict(env_prefix="VIEW_")

    page_size: int = Field(
        default=48,
        ge=1,
        le=500,
        description="Entries per page in grid view",
    )
    list_page_size: int = Field(
        default=72,
        ge=1,
        le=500,
        description="Entries per page in list view",
    )
    sort_key: Literal["label", "type", "size", "resource_type", "modified_at"] = Field(
        default="label",
        description="Initial sort field",
    )
    sort_direction: Literal["asc", "desc"] = Field(
        default="asc",
        description="Initial sort direction",
    )


class RetryConfig(BaseSettings):
    """Retry behavior configuration."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of retry attempts",
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0.1,
        le=30.0,
        description="Base delay between retries (exponential backoff)",
    )
    max_delay_seconds: float = Field(
        default=60.0,
        ge=1.0,
        le=300.0,
        description="Maximum delay between retries",
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.5,
        le=4.0,
        description="Base for exponential backoff calculation",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )
    include_timestamp: bool = Field(
        default=True,
        description="Include timestamp in log entries",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides
    a single entry point for configuration access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    # Sub-configurations
    catalog: CatalogServiceConfig = Field(default_factory=CatalogServiceConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
