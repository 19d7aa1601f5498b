"""
Tests for application settings.
"""

from app.config import Settings


def test_settings_load_with_only_supabase_url_and_db_url(monkeypatch):
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)
    monkeypatch.setenv("SUPABASE_URL", "https://abc.supabase.co/")
    monkeypatch.setenv("SUPABASE_DB_URL", "postgresql://localhost/postgres")

    settings = Settings(_env_file=None)

    assert settings.jwks_url() == "https://abc.supabase.co/auth/v1/.well-known/jwks.json"
    assert not hasattr(settings, "SUPABASE_SERVICE_ROLE_KEY")
    assert not hasattr(settings, "TRUSTED_PROXY_IPS")


def test_email_configured_needs_key_and_sender(monkeypatch):
    monkeypatch.setenv("EMAIL_API_KEY", "re_test")
    monkeypatch.delenv("FROM_EMAIL", raising=False)

    assert Settings(_env_file=None).email_configured() is False

    monkeypatch.setenv("FROM_EMAIL", "noreply@capco.example")

    assert Settings(_env_file=None).email_configured() is True
