"""Configuration management for the User Management API.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.

Token signing material is deliberately not part of these settings; it is
resolved separately by ``resolve_token_trust_settings``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="USERMGMT_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "User Management API"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/users.db"
    db_echo: bool = False
    seed_database: bool = True

    # Layered configuration sources (JSON files, secrets directory)
    config_dir: str = "."
    secrets_dir: str | None = Field(
        default=None,
        description="Directory of secret files named by dotted configuration key",
    )

    # Token Settings
    token_clock_skew_seconds: int = 120

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"
    audit_excluded_headers: list[str] = Field(default=["authorization", "cookie"])

    @field_validator("cors_origins", "audit_excluded_headers", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Parse a list from a comma-separated string or list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("audit_excluded_headers")
    @classmethod
    def normalize_header_names(cls, v: list[str]) -> list[str]:
        """Header names are compared lowercase."""
        return [name.lower() for name in v]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def is_diagnostic_mode(self) -> bool:
        """Whether internal error detail may be exposed to callers.

        Never true in production, whatever the debug flag says.
        """
        return not self.is_production and (self.is_development or self.debug)

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
