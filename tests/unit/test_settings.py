"""Tests for environment-driven server settings."""

from src.api.config import Settings


def test_defaults(monkeypatch):
    for name in ("PORT", "API_PORT", "LOG_LEVEL", "AUTOSTART_DEBATE", "CORS_ORIGINS", "FRONTEND_PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.api_port == 3001
    assert settings.autostart_debate is False
    assert settings.log_level == "INFO"
    assert "http://localhost:3000" in settings.cors_origins


def test_port_alias_and_comma_separated_origins(monkeypatch):
    monkeypatch.delenv("API_PORT", raising=False)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.api_port == 8080
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"


def test_frontend_port_extends_default_origins(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.setenv("FRONTEND_PORT", "5173")

    settings = Settings(_env_file=None)

    assert settings.cors_origins[0] == "http://localhost:5173"
