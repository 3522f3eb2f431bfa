# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Services in core/ never import the global instance. They receive a Settings
# object when they are constructed (see app/dependencies.py and workers/tasks.py).
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    GENERATED_BUCKET: str = Field(
        default="generated-images",
        description="Storage bucket for generated artifacts"
    )

    USER_INPUT_BUCKET: str = Field(
        default="user-bucket-images",
        description="Storage bucket for user uploaded images"
    )

    # -------------------------------------------------------------------------
    # Replicate Configuration
    # -------------------------------------------------------------------------

    REPLICATE_API_TOKEN: str = Field(
        ...,
        description="Replicate API token"
    )

    REPLICATE_BASE_URL: str = Field(
        default="https://api.replicate.com",
        description="Replicate API base URL"
    )

    REPLICATE_IMAGE_MODEL: str = Field(
        default="black-forest-labs/flux-kontext-max",
        description="Default image model when a project doesn't name one"
    )

    REPLICATE_VIDEO_MODEL: str = Field(
        default="kwaivgi/kling-v2.1",
        description="Model version used for video predictions"
    )

    REPLICATE_TIMEOUT: float = Field(
        default=120.0,
        gt=0,
        description="HTTP timeout (seconds) for a single Replicate request"
    )

    REPLICATE_POLL_INTERVAL: float = Field(
        default=1.5,
        gt=0,
        description="Seconds between prediction status checks"
    )

    REPLICATE_MAX_WAIT: float = Field(
        default=300.0,
        gt=0,
        description="Give up waiting on a synchronous prediction after this many seconds"
    )

    # -------------------------------------------------------------------------
    # Redis / Celery Configuration
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    POLL_SCHEDULE_SECONDS: int = Field(
        default=60,
        ge=5,
        description="How often beat runs the prediction poller and schedule processor"
    )

    SCHEDULE_BATCH_SIZE: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Max pending jobs the schedule processor picks up per run"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once.
    Missing SUPABASE_* or REPLICATE_API_TOKEN values fail here, on first use.
    """
    return Settings()
