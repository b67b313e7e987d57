# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Development-only signing key; refused outside development
DEFAULT_JWT_SECRET_KEY = "dev-secret-key-change-in-production"


def _split_csv(value: str) -> list[str]:
    """Split a comma-separated setting into stripped, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # The recipes table and the Vault secret store both live in Supabase

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # OpenAI / Vision Configuration
    # -------------------------------------------------------------------------
    # Used by the recipe extractor to read recipes from photos

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for recipe image extraction"
    )

    OPENAI_VISION_MODEL: str = Field(
        default="gpt-4o",
        description="Vision-capable model used to extract recipes from images"
    )

    EXTRACTION_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for extraction (lower = more consistent)"
    )

    EXTRACTION_MAX_TOKENS: int = Field(
        default=2000,
        ge=100,
        le=16000,
        description="Max output tokens for a single extraction"
    )

    # -------------------------------------------------------------------------
    # Image Upload Settings
    # -------------------------------------------------------------------------

    MAX_IMAGE_SIZE_MB: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum recipe image size in MB"
    )

    ALLOWED_IMAGE_TYPES: str = Field(
        default="image/jpeg,image/jpg,image/png,image/webp",
        description="Allowed image content types (comma-separated)"
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
    # Token Signing
    # -------------------------------------------------------------------------

    JWT_SECRET_KEY: str = Field(
        default=DEFAULT_JWT_SECRET_KEY,
        min_length=16,
        description="Secret key for signing API bearer tokens (HS256)"
    )

    JWT_ISSUER: str = Field(
        default="RecipeApi",
        description="Issuer claim written to and required on bearer tokens"
    )

    JWT_AUDIENCE: str = Field(
        default="RecipeFrontend",
        description="Audience claim written to and required on bearer tokens"
    )

    JWT_EXPIRE_HOURS: int = Field(
        default=24,
        ge=1,
        le=24 * 30,
        description="Lifetime of issued bearer tokens in hours"
    )

    JWT_CLOCK_SKEW_SECONDS: int = Field(
        default=300,
        ge=0,
        le=3600,
        description="Leeway applied to exp/iat checks when validating tokens"
    )

    # -------------------------------------------------------------------------
    # Access Gate
    # -------------------------------------------------------------------------
    # Every request outside the public paths must resolve to an email that is
    # on the approved list.

    ALLOW_UNAUTHENTICATED: bool = Field(
        default=False,
        description="Skip the access gate entirely (only honored in development)"
    )

    APPROVED_EMAILS: str = Field(
        default="",
        description="Approved emails (comma-separated), used when the secret store is disabled"
    )

    SECRET_STORE_ENABLED: bool = Field(
        default=False,
        description="Load approved emails from Supabase Vault instead of APPROVED_EMAILS"
    )

    APPROVED_EMAILS_SECRET_NAME: str = Field(
        default="approved-users",
        description="Vault secret holding a JSON array of approved emails"
    )

    ALLOWLIST_REFRESH_SECONDS: int = Field(
        default=300,
        ge=1,
        description="How long a loaded approved-email list stays fresh"
    )

    ALLOWLIST_FETCH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single approved-email list fetch"
    )

    ALLOWLIST_RETRY_BACKOFF_SECONDS: float = Field(
        default=5.0,
        ge=0,
        description="Initial delay before retrying a failed list refresh (0 = retry every request)"
    )

    ALLOWLIST_RETRY_BACKOFF_MAX_SECONDS: float = Field(
        default=60.0,
        ge=0,
        description="Upper bound for the retry delay after repeated refresh failures"
    )

    PUBLIC_PATH_PREFIXES: str = Field(
        default="/health,/.auth",
        description="Path prefixes that bypass the access gate (comma-separated)"
    )

    PUBLIC_PATHS: str = Field(
        default="/api/auth/token",
        description="Exact paths that bypass the access gate (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @model_validator(mode="after")
    def _require_signing_key_outside_development(self) -> "Settings":
        """Refuse the built-in JWT_SECRET_KEY in staging and production."""
        if self.ENVIRONMENT != "development" and self.JWT_SECRET_KEY == DEFAULT_JWT_SECRET_KEY:
            raise ValueError(
                f"JWT_SECRET_KEY must be set when ENVIRONMENT={self.ENVIRONMENT}"
            )
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return _split_csv(self.CORS_ORIGINS)

    @property
    def allowed_image_types_list(self) -> list[str]:
        """Parse ALLOWED_IMAGE_TYPES into lower-cased content types."""
        return [content_type.lower() for content_type in _split_csv(self.ALLOWED_IMAGE_TYPES)]

    @property
    def max_image_size_bytes(self) -> int:
        """Convert MB to bytes for image size validation."""
        return self.MAX_IMAGE_SIZE_MB * 1024 * 1024

    @property
    def approved_emails_list(self) -> list[str]:
        """Parse APPROVED_EMAILS into a list (case is normalized by the gate)."""
        return _split_csv(self.APPROVED_EMAILS)

    @property
    def public_path_prefixes_list(self) -> list[str]:
        return [path.lower() for path in _split_csv(self.PUBLIC_PATH_PREFIXES)]

    @property
    def public_paths_list(self) -> list[str]:
        return [path.lower() for path in _split_csv(self.PUBLIC_PATHS)]

    @property
    def allow_unauthenticated_access(self) -> bool:
        """
        Whether the access gate should admit everything.

        Requires both ALLOW_UNAUTHENTICATED and the development environment,
        so a stray flag in staging or production has no effect.
        """
        return self.is_development and self.ALLOW_UNAUTHENTICATED

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

    Using lru_cache ensures we only parse .env and validate once,
    not on every access. This is the recommended pattern for
    pydantic-settings.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
