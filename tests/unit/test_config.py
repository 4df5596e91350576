"""Unit tests for settings and constants."""

import pytest

from helixintel.core.config import Settings, constants


@pytest.mark.unit
class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SQLITE_DB_PATH", raising=False)
        monkeypatch.delenv("REQUIRE_COMPLETION_PHOTO", raising=False)

        settings = Settings(_env_file=None)

        assert settings.sqlite_db_path == "helixintel.db"
        assert settings.require_completion_photo is False
        assert settings.schedule_cache_ttl_seconds == 300

    def test_environment_variables_override(self, monkeypatch):
        monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/maintenance.db")
        monkeypatch.setenv("REQUIRE_COMPLETION_PHOTO", "true")

        settings = Settings(_env_file=None)

        assert settings.sqlite_db_path == "/tmp/maintenance.db"
        assert settings.require_completion_photo is True

    def test_is_production(self):
        assert Settings(_env_file=None, environment="Production").is_production
        assert not Settings(_env_file=None, environment="development").is_production

    def test_require_credential_missing(self):
        settings = Settings(_env_file=None, logfire_token=None)

        with pytest.raises(ValueError, match="LOGFIRE_TOKEN"):
            settings.require_credential("logfire_token", "Logfire")

    def test_require_credential_present(self):
        settings = Settings(_env_file=None, logfire_token="tok")

        assert settings.require_credential("logfire_token", "Logfire") == "tok"


@pytest.mark.unit
class TestConstants:
    """Tests for application constants."""

    def test_custom_frequency_bounds(self):
        assert constants.MIN_CUSTOM_FREQUENCY_DAYS == 1
        assert constants.MAX_CUSTOM_FREQUENCY_DAYS == 365

    def test_pagination_limits(self):
        assert constants.DEFAULT_PER_PAGE_LIMIT <= constants.MAX_PER_PAGE_LIMIT
