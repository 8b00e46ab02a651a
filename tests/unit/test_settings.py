"""Unit tests for environment-driven settings."""

from datetime import timedelta

import pytest

from accounts.config.settings import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TOKEN_LIFETIME_SECONDS", raising=False)
        monkeypatch.delenv("MAILER", raising=False)

        settings = Settings(_env_file=None)

        assert settings.token_lifetime == timedelta(minutes=15)
        assert settings.mailer == "console"
        assert settings.argon2_memory_cost == 65536

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOKEN_LIFETIME_SECONDS", "60")
        monkeypatch.setenv("BASE_URL", "https://accounts.example.com")
        monkeypatch.setenv("MAILER", "smtp")

        settings = Settings(_env_file=None)

        assert settings.token_lifetime == timedelta(seconds=60)
        assert settings.base_url == "https://accounts.example.com"
        assert settings.mailer == "smtp"

    def test_rejects_unknown_mailer(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAILER", "carrier-pigeon")

        with pytest.raises(ValueError):
            Settings(_env_file=None)
