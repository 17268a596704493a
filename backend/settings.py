"""
Centralized settings configuration using Pydantic BaseSettings.

Only the composition root (backend/providers.py) reads settings; domain
components and adapters receive plain constructor arguments.

Usage:
    from backend.settings import get_settings, Settings

    settings = get_settings()
    print(settings.zwift_assumed_ftp)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.adapters.fit.mappings import manufacturer_id
from domain.validation import ToleranceConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Round-trip Tolerances
    # -------------------------------------------------------------------------
    tolerance_time: float = Field(default=1.0, ge=0, description="Seconds")
    tolerance_distance: float = Field(default=1.0, ge=0, description="Meters")
    tolerance_power: float = Field(default=1.0, ge=0, description="Watts")
    tolerance_ftp: float = Field(default=1.0, ge=0, description="Percent of FTP")
    tolerance_heart_rate: float = Field(default=1.0, ge=0, description="Beats per minute")
    tolerance_cadence: float = Field(default=1.0, ge=0, description="Revolutions per minute")
    tolerance_pace: float = Field(default=0.01, ge=0, description="Meters per second")

    # -------------------------------------------------------------------------
    # Zwift Output
    # -------------------------------------------------------------------------
    zwift_assumed_ftp: float = Field(
        default=250,
        gt=0,
        description="FTP in watts used to express absolute power as FTP fractions",
    )
    zwift_free_ride_seconds: float = Field(
        default=300,
        gt=0,
        description="FreeRide length for steps without a time duration",
    )

    # -------------------------------------------------------------------------
    # FIT / GCN / TCX Output
    # -------------------------------------------------------------------------
    fit_default_manufacturer: str = Field(
        default="garmin",
        description="Manufacturer written to file_id when the record names an unknown one",
    )
    garmin_default_workout_name: str = Field(
        default="Structured Workout",
        description="workoutName used when the workout has no name",
    )
    tcx_validate_output: bool = Field(
        default=True,
        description="Run structural validation on generated TCX",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("fit_default_manufacturer")
    @classmethod
    def validate_fit_default_manufacturer(cls, v: str) -> str:
        """Ensure the fallback manufacturer resolves to a FIT manufacturer id."""
        if manufacturer_id(v) is None:
            raise ValueError(f"Unknown FIT manufacturer '{v}'")
        return v.strip()

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def tolerances(self) -> ToleranceConfig:
        """Round-trip tolerances as a domain ToleranceConfig."""
        return ToleranceConfig(
            time_tolerance=self.tolerance_time,
            distance_tolerance=self.tolerance_distance,
            power_tolerance=self.tolerance_power,
            ftp_tolerance=self.tolerance_ftp,
            hr_tolerance=self.tolerance_heart_rate,
            cadence_tolerance=self.tolerance_cadence,
            pace_tolerance=self.tolerance_pace,
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    For testing, clear the cache with get_settings.cache_clear().
    """
    return Settings()
