"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
All settings are validated at startup - missing required values will raise an error.

Production Mode:
    When app_env="production", additional validations apply:
    - admin_auth_enabled must be True and admin_api_key must be set
    - debug must be False
    - cors_allowed_origins cannot be ["*"]
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Supabase
    # -------------------------------------------------------------------------
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_key: SecretStr = Field(..., description="Supabase anon or service key")
    store_page_size: int = Field(
        default=1000,
        ge=1,
        description="Rows fetched per request when scanning a whole table",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    api_host: str = Field(default="0.0.0.0", description="Bind address for the API server")
    api_port: int = Field(default=8000, description="Port for the API server")

    # -------------------------------------------------------------------------
    # Directory / Routing
    # -------------------------------------------------------------------------
    site_url: str = Field(
        default="https://www.dogboardingkennels.us",
        description="Public base URL used to build canonical article URLs",
    )
    niche_prefix: str = Field(
        default="boarding-kennels",
        description="Slug prefix of the directory vertical, e.g. /boarding-kennels-<city>",
    )
    legacy_slug_prefix: str = Field(
        default="about-",
        description="Article slug prefix of the deprecated content class",
    )
    redirect_excluded_prefixes: list[str] = Field(
        default=["/admin", "/api", "/static", "/_next", "/favicon.ico", "/docs", "/redoc", "/openapi.json"],
        description="Path prefixes that never enter the redirect engine",
    )

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    admin_api_key: SecretStr | None = Field(
        default=None,
        description="Shared key required in the X-Admin-Key header for admin routes.",
    )
    admin_auth_enabled: bool = Field(
        default=True,
        description="Require X-Admin-Key on mutating and /api/admin routes.",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins. Use ['*'] for development only.",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests",
    )

    @field_validator("niche_prefix", "legacy_slug_prefix")
    @classmethod
    def validate_prefix(cls, value: str) -> str:
        """Prefixes are matched literally and must not be blank."""
        value = value.strip()
        if not value:
            raise ValueError("prefix cannot be empty")
        return value

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are secure."""
        if self.app_env == "production":
            errors = []

            if not self.admin_auth_enabled:
                errors.append("admin_auth_enabled must be True in production")

            if self.admin_auth_enabled and not self.admin_api_key:
                errors.append("admin_api_key must be set when admin_auth_enabled is True")

            if self.debug:
                errors.append("debug must be False in production")

            if "*" in self.cors_allowed_origins:
                errors.append("cors_allowed_origins cannot contain '*' in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()
