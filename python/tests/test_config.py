"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from tunebase.config import Environment, Settings


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "postgresql+psycopg://localhost/test",
        "TUNEBASE_ENV": "test",
        "SUPABASE_JWKS_URL": "http://localhost:54321/auth/v1/.well-known/jwks.json",
        "SUPABASE_ISSUER": "http://localhost:54321/auth/v1/",
        "SUPABASE_AUDIENCES": "authenticated, anon ,",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestAuthSettings:
    def test_missing_auth_settings_rejected(self):
        with pytest.raises(ValidationError, match="SUPABASE_JWKS_URL"):
            _make_settings(SUPABASE_JWKS_URL=None)

    def test_audiences_split_and_trimmed(self):
        assert _make_settings().audience_list == ["authenticated", "anon"]

    def test_issuer_trailing_slash_stripped(self):
        assert _make_settings().normalized_issuer == "http://localhost:54321/auth/v1"

    def test_env_parsed(self):
        assert _make_settings().tunebase_env == Environment.TEST


class TestPlatformSettings:
    def test_defaults(self):
        settings = _make_settings()

        assert settings.songs_bucket == "songs"
        assert settings.covers_bucket == "covers"
        assert settings.max_audio_bytes == 50 * 1024 * 1024
        assert settings.max_cover_bytes == 5 * 1024 * 1024
        assert settings.cors_origin_list == []

    def test_storage_requires_url_and_service_key(self):
        assert not _make_settings(SUPABASE_URL="https://x.supabase.co").storage_configured
        assert _make_settings(
            SUPABASE_URL="https://x.supabase.co", SUPABASE_SERVICE_KEY="service"
        ).storage_configured

    def test_identity_requires_url_and_anon_key(self):
        assert not _make_settings(SUPABASE_ANON_KEY="anon").identity_configured
        assert _make_settings(
            SUPABASE_URL="https://x.supabase.co", SUPABASE_ANON_KEY="anon"
        ).identity_configured

    def test_cors_origins_parsed(self):
        settings = _make_settings(CORS_ALLOW_ORIGINS="http://localhost:3000, https://tunebase.app")

        assert settings.cors_origin_list == ["http://localhost:3000", "https://tunebase.app"]
