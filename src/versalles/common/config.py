"""Versalles configuration via pydantic-settings."""

import warnings
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from versalles.common.exceptions import ConfigurationError

MIN_SECRET_LENGTH = 32

_INSECURE_DEFAULTS = {
    "session_secret": "insecure-dev-session-secret-change-me-now",
}


class VersallesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="VERSALLES_")

    environment: str = "development"

    # Session cookie
    session_secret: str = "insecure-dev-session-secret-change-me-now"
    session_cookie_name: str = "versalles-session"
    session_ttl: int = 14 * 86400  # signed token lifetime, seconds
    session_refresh_after: int = 86400  # re-issue tokens older than this
    session_cookie_max_age: Optional[int] = None  # None = browser-session cookie

    # Database
    db_url: str = "sqlite+aiosqlite:///./data/versalles.db"
    store_timeout: float = 5.0

    # Identity provider (Firebase Identity Toolkit REST shape)
    identity_api_key: str = ""
    identity_base_url: str = "https://identitytoolkit.googleapis.com"
    securetoken_base_url: str = "https://securetoken.googleapis.com"
    identity_timeout: float = 10.0

    # Portal client (used by the client auth flow)
    portal_url: str = "http://localhost:8080"
    portal_timeout: float = 10.0

    # API
    api_title: str = "Versalles"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def secure_cookies(self) -> bool:
        """Plaintext transport is only tolerated for local development."""
        return not self.is_development

    def validate_for_startup(self) -> None:
        """Raise ConfigurationError for settings that must not reach a request."""
        if len(self.session_secret.encode("utf-8")) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"VERSALLES_SESSION_SECRET must be at least {MIN_SECRET_LENGTH} bytes. "
                "Generate one with: versalles gen-secret"
            )

        if self.session_refresh_after >= self.session_ttl:
            raise ConfigurationError(
                "VERSALLES_SESSION_REFRESH_AFTER must be lower than VERSALLES_SESSION_TTL"
            )

        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if not self.is_development:
            if insecure_fields:
                env_vars = ", ".join(f"VERSALLES_{f.upper()}" for f in insecure_fields)
                raise ConfigurationError(
                    f"Insecure default values detected in '{self.environment}' environment. "
                    f"Set these environment variables to secure values: {env_vars}."
                )
            if not self.identity_api_key:
                raise ConfigurationError(
                    "VERSALLES_IDENTITY_API_KEY is required outside development"
                )

        if insecure_fields:
            warnings.warn(
                "Using the insecure default session secret; set VERSALLES_SESSION_SECRET "
                "before deploying",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> VersallesSettings:
    settings = VersallesSettings()
    settings.validate_for_startup()
    return settings
