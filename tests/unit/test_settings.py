"""
Unit tests for backend/settings.py
"""

import pytest
from pydantic import ValidationError

from backend.settings import Settings, get_settings
from domain.validation import DEFAULT_TOLERANCES, ToleranceConfig


# Environment variables a developer shell might set which we need to clear for default tests
ENV_VARS = [
    "TOLERANCE_TIME",
    "TOLERANCE_PACE",
    "ZWIFT_ASSUMED_FTP",
    "ZWIFT_FREE_RIDE_SECONDS",
    "FIT_DEFAULT_MANUFACTURER",
    "GARMIN_DEFAULT_WORKOUT_NAME",
    "TCX_VALIDATE_OUTPUT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear environment variables to test true defaults."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.mark.unit
class TestSettingsDefaults:
    """Test that Settings applies correct defaults."""

    def test_tolerances_match_domain_defaults(self, clean_env):
        """Default tolerances are the domain defaults."""
        settings = Settings(_env_file=None)
        assert settings.tolerances == DEFAULT_TOLERANCES

    def test_zwift_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.zwift_assumed_ftp == 250
        assert settings.zwift_free_ride_seconds == 300

    def test_writer_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.fit_default_manufacturer == "garmin"
        assert settings.garmin_default_workout_name == "Structured Workout"
        assert settings.tcx_validate_output is True


@pytest.mark.unit
class TestSettingsValidation:
    """Test Settings field validation."""

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValidationError):
            Settings(tolerance_power=-1, _env_file=None)

    def test_zero_ftp_rejected(self):
        with pytest.raises(ValidationError):
            Settings(zwift_assumed_ftp=0, _env_file=None)

    def test_known_manufacturer_accepted(self):
        """Dictionary names and numeric ids are valid fallbacks."""
        settings = Settings(fit_default_manufacturer=" wahoo_fitness ", _env_file=None)
        assert settings.fit_default_manufacturer == "wahoo_fitness"
        assert Settings(fit_default_manufacturer="255", _env_file=None).fit_default_manufacturer == "255"

    def test_unknown_manufacturer_raises_error(self):
        """A fallback that resolves to no FIT id is rejected at load time."""
        with pytest.raises(ValidationError) as exc_info:
            Settings(fit_default_manufacturer="qqqqqqqq", _env_file=None)
        assert "Unknown FIT manufacturer" in str(exc_info.value)


@pytest.mark.unit
class TestSettingsProperties:
    """Test Settings helper properties."""

    def test_tolerances_property(self):
        """tolerances builds a domain ToleranceConfig."""
        settings = Settings(tolerance_time=2, tolerance_heart_rate=3, _env_file=None)
        tolerances = settings.tolerances
        assert isinstance(tolerances, ToleranceConfig)
        assert tolerances.time_tolerance == 2
        assert tolerances.hr_tolerance == 3


@pytest.mark.unit
class TestGetSettings:
    """Test get_settings() function."""

    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        get_settings.cache_clear()
        assert isinstance(get_settings(), Settings)

    def test_get_settings_is_cached(self):
        """get_settings should return the same cached instance."""
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_get_settings_cache_can_be_cleared(self):
        """Cache can be cleared to get fresh settings."""
        get_settings.cache_clear()
        first = get_settings()
        get_settings.cache_clear()
        assert first is not get_settings()


@pytest.mark.unit
class TestSettingsFromEnv:
    """Test Settings loading from environment variables."""

    def test_settings_loads_from_env(self, clean_env, monkeypatch):
        """Settings should load values from environment variables."""
        monkeypatch.setenv("TOLERANCE_PACE", "0.05")
        monkeypatch.setenv("ZWIFT_ASSUMED_FTP", "280")
        monkeypatch.setenv("FIT_DEFAULT_MANUFACTURER", "wahoo_fitness")

        settings = Settings(_env_file=None)

        assert settings.tolerances.pace_tolerance == 0.05
        assert settings.zwift_assumed_ftp == 280
        assert settings.fit_default_manufacturer == "wahoo_fitness"

    def test_boolean_env_vars_case_insensitive(self, clean_env, monkeypatch):
        """Boolean parsing should be case insensitive."""
        monkeypatch.setenv("TCX_VALIDATE_OUTPUT", "FALSE")
        assert Settings(_env_file=None).tcx_validate_output is False

    def test_env_names_case_insensitive(self, clean_env, monkeypatch):
        monkeypatch.setenv("tolerance_time", "5")
        assert Settings(_env_file=None).tolerance_time == 5
