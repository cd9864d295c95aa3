"""Configuration loading for docbridge.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Data source configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # MongoDB connection
    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI",
    )
    mongodb_database: str = Field(
        default="docbridge",
        description="Database holding the record collections",
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long operations wait for a reachable server (ms)",
    )
    mongodb_max_pool_size: int = Field(
        default=100,
        description="Maximum connections in the driver pool",
    )
    mongodb_tz_aware: bool = Field(
        default=True,
        description="Return timezone-aware datetimes",
    )

    # Schema management
    ensure_indexes_on_connect: bool = Field(
        default=False,
        description="Create declared indexes when the data source is opened",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("mongodb_url")
    @classmethod
    def validate_mongodb_url(cls, v: str) -> str:
        """Ensure the URI uses a MongoDB scheme."""
        v = v.strip()
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("mongodb_url must start with mongodb:// or mongodb+srv://")
        return v

    @field_validator("mongodb_database")
    @classmethod
    def validate_mongodb_database(cls, v: str) -> str:
        """Ensure the database name is not empty."""
        if not v.strip():
            raise ValueError("mongodb_database is required")
        return v.strip()

    @field_validator("mongodb_server_selection_timeout_ms")
    @classmethod
    def validate_server_selection_timeout(cls, v: int) -> int:
        """Ensure the timeout is positive."""
        if v <= 0:
            raise ValueError("mongodb_server_selection_timeout_ms must be positive")
        return v

    @field_validator("mongodb_max_pool_size")
    @classmethod
    def validate_max_pool_size(cls, v: int) -> int:
        """Ensure the pool can hold at least one connection."""
        if v <= 0:
            raise ValueError("mongodb_max_pool_size must be positive")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load data source settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
