"""Configuration loading for the pet adoption registry.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Record store configuration
    store_backend: Literal["memory", "sqlite", "postgresql"] = Field(
        default="sqlite",
        description="Record store backend type",
    )
    store_sqlite_path: str = Field(
        default="./data/registry.db",
        description="SQLite database file path",
    )
    database_url: str = Field(
        default="",
        description="PostgreSQL connection URL",
    )

    # Registry rules
    enforce_unique_owner: bool = Field(
        default=False,
        description="Reject a second user registration from the same caller identity",
    )

    # Run mode
    run_mode: Literal["cli", "http"] = Field(
        default="cli",
        description="Run mode",
    )

    # CLI configuration
    cli_identity: str = Field(
        default="local-operator",
        description="Caller identity used by CLI commands that need one",
    )

    # HTTP configuration
    http_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for the HTTP server",
    )
    http_port: int = Field(
        default=8080,
        description="Port to listen on for the HTTP server",
    )
    http_api_key: str = Field(
        default="",
        description="API key for HTTP authentication (required for production)",
    )
    http_require_auth: bool = Field(
        default=False,
        description="Require API key authentication for HTTP API endpoints",
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

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("http_port")
    @classmethod
    def validate_http_port(cls, v: int) -> int:
        """Ensure HTTP port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("http_port must be between 1 and 65535")
        return v

    @field_validator("cli_identity")
    @classmethod
    def validate_cli_identity(cls, v: str) -> str:
        """Ensure the CLI identity is not blank."""
        if not v.strip():
            raise ValueError("cli_identity must be a non-empty string")
        return v.strip()

    @field_validator("store_sqlite_path")
    @classmethod
    def validate_sqlite_path(cls, v: str) -> str:
        """Ensure the SQLite path is not blank."""
        if not v.strip():
            raise ValueError("store_sqlite_path must be a non-empty string")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

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
