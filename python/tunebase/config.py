"""Application settings loaded from environment variables.

Environment Configuration:
    TUNEBASE_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: PostgreSQL connection string (required)

Auth Configuration (required in all environments):
    SUPABASE_JWKS_URL: Full URL to Supabase JWKS endpoint
    SUPABASE_ISSUER: Expected JWT issuer (trailing slash stripped)
    SUPABASE_AUDIENCES: Comma-separated list of allowed audiences

Supabase Platform Configuration (optional, fakes are used when unset):
    SUPABASE_URL: Supabase project URL
    SUPABASE_SERVICE_KEY: Service role key (storage uploads/deletes)
    SUPABASE_ANON_KEY: Anon key (sign-up / sign-in)

Note: All environments use Supabase JWKS for JWT verification.
Local/test environments use Supabase local, staging/prod use cloud.
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - SUPABASE_JWKS_URL, SUPABASE_ISSUER, SUPABASE_AUDIENCES are required in all environments
    """

    tunebase_env: Environment = Field(default=Environment.LOCAL, alias="TUNEBASE_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Supabase auth settings (required in all environments)
    supabase_jwks_url: str | None = Field(default=None, alias="SUPABASE_JWKS_URL")
    supabase_issuer: str | None = Field(default=None, alias="SUPABASE_ISSUER")
    supabase_audiences: str | None = Field(default=None, alias="SUPABASE_AUDIENCES")

    # Supabase platform settings (storage + identity)
    supabase_url: str | None = Field(default=None, alias="SUPABASE_URL")
    supabase_service_key: str | None = Field(default=None, alias="SUPABASE_SERVICE_KEY")
    supabase_anon_key: str | None = Field(default=None, alias="SUPABASE_ANON_KEY")
    songs_bucket: str = Field(default="songs", alias="SONGS_BUCKET")
    covers_bucket: str = Field(default="covers", alias="COVERS_BUCKET")

    # Upload limits
    max_audio_bytes: int = Field(default=50 * 1024 * 1024, alias="MAX_AUDIO_BYTES")  # 50 MB
    max_cover_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_COVER_BYTES")  # 5 MB

    # Browser origins allowed to call the API (comma-separated)
    cors_allow_origins: str = Field(default="", alias="CORS_ALLOW_ORIGINS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure required settings are set for all environments."""
        missing_auth = []
        if not self.supabase_jwks_url:
            missing_auth.append("SUPABASE_JWKS_URL")
        if not self.supabase_issuer:
            missing_auth.append("SUPABASE_ISSUER")
        if not self.supabase_audiences:
            missing_auth.append("SUPABASE_AUDIENCES")

        if missing_auth:
            raise ValueError(
                f"Missing required Supabase auth settings: {', '.join(missing_auth)}. "
                "Start Supabase local and export its settings, or set these environment variables."
            )

        return self

    @property
    def audience_list(self) -> list[str]:
        """Parse comma-separated audiences into a list."""
        if self.supabase_audiences:
            return [a.strip() for a in self.supabase_audiences.split(",") if a.strip()]
        return []

    @property
    def normalized_issuer(self) -> str | None:
        """Return issuer with trailing slash stripped."""
        if self.supabase_issuer:
            return self.supabase_issuer.rstrip("/")
        return None

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    @property
    def storage_configured(self) -> bool:
        """Whether real Supabase Storage credentials are available."""
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def identity_configured(self) -> bool:
        """Whether real Supabase Auth credentials are available."""
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
