# =============================================================================
# app/config.py - Plugin Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.INFERENCE_SAMPLE_SIZE)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in the working directory (if exists)
#
# Every value has a default: the host launches the plugin without any
# environment of its own, so it must start with none set.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Plugin settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for a locally launched plugin

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="production",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug logging"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level when DEBUG is off"
    )

    # -------------------------------------------------------------------------
    # RPC Server
    # -------------------------------------------------------------------------

    PLUGIN_HOST: str = Field(
        default="127.0.0.1",
        description="Interface to bind the gRPC server to (local only by default)"
    )

    PLUGIN_PORT: int = Field(
        default=0,
        ge=0,
        le=65535,
        description="Port for the gRPC server; 0 picks a free port"
    )

    MAX_WORKERS: int = Field(
        default=10,
        ge=1,
        le=256,
        description="Thread pool size for concurrent RPC calls"
    )

    SHUTDOWN_GRACE_SECONDS: float = Field(
        default=5.0,
        ge=0.0,
        le=60.0,
        description="How long in-flight calls get to finish on shutdown"
    )

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    REQUIRE_MATCHES: bool = Field(
        default=False,
        description="Log a discovery error when the glob matches no files"
    )

    MAX_OPEN_FILES: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Maximum files opened concurrently while reading headers"
    )

    INFER_TYPES: bool = Field(
        default=True,
        description="Infer property types from sampled values during Discover"
    )

    INFERENCE_SAMPLE_SIZE: int = Field(
        default=1000,
        ge=1,
        le=1_000_000,
        description="Maximum data rows sampled per schema for type inference"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in the working directory
        env_file=".env",
        env_file_encoding="utf-8",
        # Empty variables fall back to defaults
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def bind_address(self) -> str:
        """
        Address passed to the gRPC server.

        Example: "127.0.0.1:0"
        """
        return f"{self.PLUGIN_HOST}:{self.PLUGIN_PORT}"

    @property
    def log_level(self) -> str:
        """Effective log level (DEBUG overrides LOG_LEVEL)."""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The plugin settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
