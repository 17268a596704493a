"""
Per-category numeric tolerance checks for round-trip validation.

Each check compares an expected and an actual value and returns a
ToleranceViolation when ``|actual - expected|`` exceeds the category's
tolerance, or None when the value is within it.

Usage:
    from domain.validation.tolerance import DEFAULT_TOLERANCES, ToleranceChecker

    checker = ToleranceChecker(DEFAULT_TOLERANCES)
    checker.check_time(300, 300.4)   # None
    checker.check_power(250, 260)    # ToleranceViolation(field="power", ...)
"""

from typing import Optional

from pydantic import BaseModel, Field

from domain.exceptions import ToleranceViolation


class ToleranceConfig(BaseModel):
    """Allowed absolute deviation per category. Every field is required."""

    time_tolerance: float = Field(..., ge=0, description="Seconds")
    distance_tolerance: float = Field(..., ge=0, description="Meters")
    power_tolerance: float = Field(..., ge=0, description="Watts")
    ftp_tolerance: float = Field(..., ge=0, description="Percent of FTP")
    hr_tolerance: float = Field(..., ge=0, description="Beats per minute")
    cadence_tolerance: float = Field(..., ge=0, description="RPM")
    pace_tolerance: float = Field(..., ge=0, description="Meters per second")

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


DEFAULT_TOLERANCES = ToleranceConfig(
    time_tolerance=1,
    distance_tolerance=1,
    power_tolerance=1,
    ftp_tolerance=1,
    hr_tolerance=1,
    cadence_tolerance=1,
    pace_tolerance=0.01,
)

# Float noise from unit conversions (m/s <-> mm/s, s <-> ms) must not trip
# a zero tolerance.
_EPSILON = 1e-9


class ToleranceChecker:
    """Runs category-specific tolerance checks against one configuration."""

    def __init__(self, config: ToleranceConfig = DEFAULT_TOLERANCES) -> None:
        self.config = config

    @staticmethod
    def _check(
        field: str, expected: float, actual: float, tolerance: float
    ) -> Optional[ToleranceViolation]:
        deviation = abs(actual - expected)
        if deviation <= tolerance + _EPSILON:
            return None
        return ToleranceViolation(
            field=field,
            expected=expected,
            actual=actual,
            deviation=deviation,
            tolerance=tolerance,
        )

    def check_time(
        self, expected: float, actual: float, field: str = "time"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.time_tolerance)

    def check_distance(
        self, expected: float, actual: float, field: str = "distance"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.distance_tolerance)

    def check_power(
        self, expected: float, actual: float, field: str = "power"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.power_tolerance)

    def check_ftp_percent(
        self, expected: float, actual: float, field: str = "power"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.ftp_tolerance)

    def check_heart_rate(
        self, expected: float, actual: float, field: str = "heart_rate"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.hr_tolerance)

    def check_cadence(
        self, expected: float, actual: float, field: str = "cadence"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.cadence_tolerance)

    def check_pace(
        self, expected: float, actual: float, field: str = "pace"
    ) -> Optional[ToleranceViolation]:
        return self._check(field, expected, actual, self.config.pace_tolerance)

    def check_exact(
        self, expected: float, actual: float, field: str
    ) -> Optional[ToleranceViolation]:
        """Counts, zone numbers and enum positions must match exactly."""
        return self._check(field, expected, actual, 0)
