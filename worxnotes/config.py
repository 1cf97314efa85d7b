"""
Configuration settings for Worx Notes.
Uses Pydantic for type-safe configuration management.
"""
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

from worxnotes.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORXNOTES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Worx Notes"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Backend (required)
    backend_url: str
    api_key: str

    # Storage
    storage_dir: str = "./diagnostic-files"
    preferences_path: str = "./.worxnotes-preferences.json"

    # Notifications
    notification_timeout: float = 5.0  # seconds

    # Suggestions
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    suggestion_recipient: str = "doug@d3x.com"
    suggestion_sender: str = "Worx Notes <noreply@resend.dev>"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # API
    api_v1_prefix: str = "/api/v1"


def load_settings(**overrides) -> Settings:
    """Build settings, turning missing backend configuration into a fatal error."""
    try:
        settings = Settings(**overrides)
    except PydanticValidationError as exc:
        missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
        raise ConfigurationError(
            f"Missing or invalid configuration: {', '.join(missing)}"
        ) from exc

    if not settings.backend_url.strip() or not settings.api_key.strip():
        raise ConfigurationError("Backend URL and API key are required")
    return settings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()
