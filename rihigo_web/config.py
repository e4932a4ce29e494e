"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works against a local API out of the box
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # External API
    api_url: str = "http://localhost:8080"
    api_timeout_seconds: float = 15.0

    @field_validator("api_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are always written with a leading slash."""
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # Session cookie
    session_secret: str = "dev-session-secret-change-me"
    session_cookie_name: str = "rihigo_session"
    session_max_age_seconds: int = 30 * 24 * 3600
    session_https_only: bool = False

    # Google sign-in
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:5173/auth/google/callback"

    # Site
    site_url: str = "http://localhost:5173"
    default_locale: str = "en"
    supported_locales: list[str] = ["en", "it"]
    default_currency: str = "USD"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
