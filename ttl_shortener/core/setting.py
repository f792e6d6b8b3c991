"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Defaults to SQLite (file-based) for easy local development
- Settings are passed explicitly to create_app(); the module-level instance
  is only the default used by the ASGI entry point
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )

    # Database Configuration
    # For SQLite: sqlite+aiosqlite:///./urlshortener.db (default)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./urlshortener.db",
        description="Database connection string"
    )
    AUTO_CREATE_TABLES: bool = Field(
        default=True,
        description="Create missing tables on startup (use alembic migrations in production)"
    )

    # Server Configuration
    HOST: str = Field(default="0.0.0.0", description="Host to bind to")
    PORT: int = Field(default=3000, description="Port to listen on")

    # Application Configuration
    BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL for generating short URLs"
    )

    # Short Code Configuration
    SHORT_CODE_LENGTH: int = Field(
        default=8,
        ge=1,
        le=32,
        description="Fixed length for all generated short codes"
    )
    MAX_COLLISION_RETRIES: int = Field(
        default=5,
        ge=1,
        description="Insert attempts before giving up on a unique short code"
    )
    MAX_EXPIRE_IN_HOURS: float = Field(
        default=24 * 365 * 100,
        gt=0,
        description="Largest accepted absolute value for expireInHours"
    )

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable per-IP rate limiting")
    RATE_LIMIT_SHORTEN: str = Field(default="10/minute", description="Limit for POST /shorten")
    RATE_LIMIT_REDIRECT: str = Field(default="100/minute", description="Limit for GET /{short_code}")

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    LOG_JSON: bool = Field(default=False, description="Use JSON format for logs")


settings = Settings()
