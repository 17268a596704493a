"""
Step target value objects.

A target is what the athlete aims for during a step. Each target kind carries
one of three encodings: a single value with a unit, a min/max range, or a
zone number.

Examples:
    >>> PowerTarget(value=PowerValue(unit="percent_ftp", value=85))
    >>> HeartRateTarget(value=ZoneValue(value=3))
    >>> PaceTarget(value=RangeValue(min=3.2, max=3.6))
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

_FROZEN = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


# ---------------------------------------------------------------------------
# Target values
# ---------------------------------------------------------------------------


class ZoneValue(BaseModel):
    unit: Literal["zone"] = "zone"
    value: int = Field(..., ge=1, le=7, description="Training zone number")

    model_config = _FROZEN


class RangeValue(BaseModel):
    unit: Literal["range"] = "range"
    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "RangeValue":
        if self.min > self.max:
            raise ValueError("range min must not exceed max")
        return self

    model_config = _FROZEN


class HeartRateRangeValue(BaseModel):
    unit: Literal["range"] = "range"
    min: float = Field(..., ge=0, le=300)
    max: float = Field(..., ge=0, le=300)

    @model_validator(mode="after")
    def check_bounds(self) -> "HeartRateRangeValue":
        if self.min > self.max:
            raise ValueError("range min must not exceed max")
        return self

    model_config = _FROZEN


class PowerValue(BaseModel):
    unit: Literal["watts", "percent_ftp"]
    value: float = Field(..., ge=0)

    model_config = _FROZEN


class HeartRateValue(BaseModel):
    unit: Literal["bpm", "percent_max"]
    value: float = Field(..., ge=0, le=300)

    model_config = _FROZEN


class CadenceValue(BaseModel):
    unit: Literal["rpm"] = "rpm"
    value: float = Field(..., ge=0)

    model_config = _FROZEN


class PaceValue(BaseModel):
    unit: Literal["mps"] = "mps"
    value: float = Field(..., gt=0, description="Speed in meters per second")

    model_config = _FROZEN


class StrokeValue(BaseModel):
    """Swim stroke encoded with the binary device table (0=freestyle .. 6=im)."""

    unit: Literal["swim_stroke"] = "swim_stroke"
    value: int = Field(..., ge=0, le=6)

    model_config = _FROZEN


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


class OpenTarget(BaseModel):
    type: Literal["open"] = "open"

    model_config = _FROZEN


class PowerTarget(BaseModel):
    type: Literal["power"] = "power"
    value: Annotated[
        Union[PowerValue, ZoneValue, RangeValue], Field(discriminator="unit")
    ]

    model_config = _FROZEN


class HeartRateTarget(BaseModel):
    type: Literal["heart_rate"] = "heart_rate"
    value: Annotated[
        Union[HeartRateValue, ZoneValue, HeartRateRangeValue], Field(discriminator="unit")
    ]

    model_config = _FROZEN


class CadenceTarget(BaseModel):
    type: Literal["cadence"] = "cadence"
    value: Annotated[Union[CadenceValue, RangeValue], Field(discriminator="unit")]

    model_config = _FROZEN


class PaceTarget(BaseModel):
    type: Literal["pace"] = "pace"
    value: Annotated[
        Union[PaceValue, ZoneValue, RangeValue], Field(discriminator="unit")
    ]

    model_config = _FROZEN


class StrokeTypeTarget(BaseModel):
    type: Literal["stroke_type"] = "stroke_type"
    value: StrokeValue

    model_config = _FROZEN


Target = Annotated[
    Union[
        OpenTarget,
        PowerTarget,
        HeartRateTarget,
        CadenceTarget,
        PaceTarget,
        StrokeTypeTarget,
    ],
    Field(discriminator="type"),
]

TargetType = Literal["open", "power", "heart_rate", "cadence", "pace", "stroke_type"]
