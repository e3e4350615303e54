"""Tests for configuration settings."""

import pytest
from pydantic import ValidationError

from pvdash.config.settings import Settings


class TestSettings:
    """Test Settings class."""

    def test_settings_default_values(self, monkeypatch):
        """Test default values are set correctly."""
        for var in (
            "PVDASH_API_BASE_URL",
            "PVDASH_FALLBACK_ENABLED",
            "PVDASH_FALLBACK_DETAIL_WEATHER",
            "PVDASH_FALLBACK_TIMEZONE",
        ):
            monkeypatch.delenv(var, raising=False)

        settings = Settings(_env_file=None)

        assert settings.api_base_url == "http://localhost:8000"
        assert settings.api_timeout == 10.0
        assert settings.clients_path == "/api/clients"
        assert settings.installations_path == "/api/installations"
        assert settings.power_data_path == "/api/power-data"
        assert settings.energy_data_path == "/api/energy-data"
        assert settings.weather_data_path == "/api/weather-data"
        assert settings.issues_path == "/api/issues"
        assert settings.reports_path == "/api/reports"
        assert settings.fallback_enabled is True
        assert settings.fallback_detail_weather is False
        assert settings.fallback_timezone == "Europe/Warsaw"
        assert settings.log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    def test_settings_custom_values(self):
        """Test custom values override defaults."""
        settings = Settings(
            _env_file=None,
            api_base_url="https://pv.example.com",
            api_timeout=30,
            fallback_enabled=False,
            fallback_seed=7,
            log_level="DEBUG",
        )

        assert settings.api_base_url == "https://pv.example.com"
        assert settings.api_timeout == 30
        assert settings.fallback_enabled is False
        assert settings.fallback_seed == 7
        assert settings.log_level == "DEBUG"

    def test_settings_log_level_validation(self):
        """Test invalid log level is rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="VERBOSE")

    def test_settings_timezone_validation(self):
        """Test unknown time zone names are rejected."""
        assert Settings(_env_file=None, fallback_timezone="UTC").fallback_timezone == "UTC"
        with pytest.raises(ValidationError, match="Unknown time zone"):
            Settings(_env_file=None, fallback_timezone="Mars/Olympus_Mons")

    @pytest.mark.parametrize(
        "base_url,path,expected",
        [
            ("http://localhost:8000", "/api/clients", "http://localhost:8000/api/clients"),
            ("http://localhost:8000/", "/api/clients", "http://localhost:8000/api/clients"),
            ("http://host/prefix", "api/issues", "http://host/prefix/api/issues"),
        ],
    )
    def test_endpoint_url(self, base_url, path, expected):
        """Test joining base URL and endpoint path."""
        settings = Settings(_env_file=None, api_base_url=base_url)
        assert settings.endpoint_url(path) == expected


class TestSettingsFromEnv:
    """Test Settings loading from environment variables."""

    def test_settings_from_env_with_prefix(self, monkeypatch):
        """Test settings load from PVDASH_ prefixed env vars."""
        monkeypatch.setenv("PVDASH_API_BASE_URL", "http://env-backend:9000")
        monkeypatch.setenv("PVDASH_FALLBACK_DETAIL_WEATHER", "true")
        monkeypatch.setenv("PVDASH_LOG_LEVEL", "WARNING")

        from pvdash.config.settings import get_settings

        get_settings.cache_clear()

        settings = get_settings()
        assert settings.api_base_url == "http://env-backend:9000"
        assert settings.fallback_detail_weather is True
        assert settings.log_level == "WARNING"

        get_settings.cache_clear()

    def test_settings_ignores_extra_env_vars(self, monkeypatch):
        """Test that extra env vars don't cause errors."""
        monkeypatch.setenv("PVDASH_UNKNOWN_OPTION", "value")
        monkeypatch.setenv("SOME_OTHER_VAR", "value")

        settings = Settings(_env_file=None)
        assert settings.api_timeout > 0
