"""
Application configuration.

Loads settings from environment variables with sensible defaults.
Settings are frozen: they are built once at startup and handed to the
components that need them.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-jwt-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SCRIBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ==========================================================================
    # Environment
    # ==========================================================================

    app_name: str = "scribe-api"
    environment: str = "development"

    # Stack traces in error responses. Never enable on a public deployment.
    verbose_errors: bool = False

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: str = "*"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    password_hash_iterations: int = 100_000

    # ==========================================================================
    # Pagination
    # ==========================================================================

    default_page_limit: int = 10
    max_page_limit: int = 100

    # ==========================================================================
    # Observability
    # ==========================================================================

    log_level: str = "INFO"
    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @model_validator(mode="after")
    def _require_real_secret_in_production(self) -> Settings:
        if self.is_production and self.jwt_secret_key == DEFAULT_JWT_SECRET:
            raise ValueError("SCRIBE_JWT_SECRET_KEY must be set in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
