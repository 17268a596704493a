"""
Step duration value objects.

A duration says when a workout step ends. It is a tagged union on ``type``;
the step's ``durationType`` must name the same variant.

Examples:
    >>> TimeDuration(seconds=300)
    >>> DistanceDuration(meters=1000)
    >>> RepeatUntilTimeDuration(seconds=1800, repeatFrom=0)
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

_FROZEN = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class TimeDuration(BaseModel):
    type: Literal["time"] = "time"
    seconds: float = Field(..., gt=0, description="Step length in seconds")

    model_config = _FROZEN


class DistanceDuration(BaseModel):
    type: Literal["distance"] = "distance"
    meters: float = Field(..., gt=0, description="Step length in meters")

    model_config = _FROZEN


class CaloriesDuration(BaseModel):
    type: Literal["calories"] = "calories"
    calories: int = Field(..., gt=0)

    model_config = _FROZEN


class HeartRateLessThanDuration(BaseModel):
    type: Literal["heart_rate_less_than"] = "heart_rate_less_than"
    bpm: int = Field(..., gt=0, le=300)

    model_config = _FROZEN


class PowerLessThanDuration(BaseModel):
    type: Literal["power_less_than"] = "power_less_than"
    watts: float = Field(..., gt=0)

    model_config = _FROZEN


class PowerGreaterThanDuration(BaseModel):
    type: Literal["power_greater_than"] = "power_greater_than"
    watts: float = Field(..., gt=0)

    model_config = _FROZEN


class RepeatUntilTimeDuration(BaseModel):
    type: Literal["repeat_until_time"] = "repeat_until_time"
    seconds: float = Field(..., gt=0)
    repeatFrom: int = Field(..., ge=0, description="stepIndex the repeat jumps back to")

    model_config = _FROZEN


class RepeatUntilDistanceDuration(BaseModel):
    type: Literal["repeat_until_distance"] = "repeat_until_distance"
    meters: float = Field(..., gt=0)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class RepeatUntilCaloriesDuration(BaseModel):
    type: Literal["repeat_until_calories"] = "repeat_until_calories"
    calories: int = Field(..., gt=0)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class RepeatUntilHeartRateLessThanDuration(BaseModel):
    type: Literal["repeat_until_heart_rate_less_than"] = "repeat_until_heart_rate_less_than"
    bpm: int = Field(..., gt=0, le=300)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class RepeatUntilHeartRateGreaterThanDuration(BaseModel):
    type: Literal["repeat_until_heart_rate_greater_than"] = "repeat_until_heart_rate_greater_than"
    bpm: int = Field(..., gt=0, le=300)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class RepeatUntilPowerLessThanDuration(BaseModel):
    type: Literal["repeat_until_power_less_than"] = "repeat_until_power_less_than"
    watts: float = Field(..., gt=0)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class RepeatUntilPowerGreaterThanDuration(BaseModel):
    type: Literal["repeat_until_power_greater_than"] = "repeat_until_power_greater_than"
    watts: float = Field(..., gt=0)
    repeatFrom: int = Field(..., ge=0)

    model_config = _FROZEN


class OpenDuration(BaseModel):
    """Step ends when the athlete presses the lap button."""

    type: Literal["open"] = "open"

    model_config = _FROZEN


Duration = Annotated[
    Union[
        TimeDuration,
        DistanceDuration,
        CaloriesDuration,
        HeartRateLessThanDuration,
        PowerLessThanDuration,
        PowerGreaterThanDuration,
        RepeatUntilTimeDuration,
        RepeatUntilDistanceDuration,
        RepeatUntilCaloriesDuration,
        RepeatUntilHeartRateLessThanDuration,
        RepeatUntilHeartRateGreaterThanDuration,
        RepeatUntilPowerLessThanDuration,
        RepeatUntilPowerGreaterThanDuration,
        OpenDuration,
    ],
    Field(discriminator="type"),
]

DurationType = Literal[
    "time",
    "distance",
    "calories",
    "heart_rate_less_than",
    "power_less_than",
    "power_greater_than",
    "repeat_until_time",
    "repeat_until_distance",
    "repeat_until_calories",
    "repeat_until_heart_rate_less_than",
    "repeat_until_heart_rate_greater_than",
    "repeat_until_power_less_than",
    "repeat_until_power_greater_than",
    "open",
]
