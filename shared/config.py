"""
Shared Configuration Module

Centralized configuration management for the enrollment service using Pydantic Settings.
Supports environment variables, .env files, and runtime overrides.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "staging", "production"] = "development"
    debug: bool = Field(default=False, description="Enable debug mode")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./enrollment.db",
        description="SQLAlchemy async URL, e.g. postgresql+psycopg://user:pw@host/db",
    )
    database_echo: bool = False
    database_pool_size: int = 20
    database_max_overflow: int = 40

    # API Configuration
    api_v1_prefix: str = "/api/v1"
    service_host: str = "0.0.0.0"
    service_port: int = 8002

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()


# Convenience exports
settings = get_settings()
