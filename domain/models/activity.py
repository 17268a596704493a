"""
Recorded activity data: sessions, laps, sample records and events.

Units are SI throughout: seconds, meters, meters per second, watts, bpm, rpm.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Position(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class Session(BaseModel):
    """Summary of a whole recorded activity."""

    startTime: datetime
    totalElapsedTime: float = Field(..., ge=0)
    totalTimerTime: Optional[float] = Field(default=None, ge=0)
    totalDistance: Optional[float] = Field(default=None, ge=0)
    sport: str = Field(..., min_length=1)
    subSport: Optional[str] = None
    avgHeartRate: Optional[int] = Field(default=None, ge=0, le=300)
    maxHeartRate: Optional[int] = Field(default=None, ge=0, le=300)
    avgCadence: Optional[float] = Field(default=None, ge=0)
    maxCadence: Optional[float] = Field(default=None, ge=0)
    avgPower: Optional[float] = Field(default=None, ge=0)
    maxPower: Optional[float] = Field(default=None, ge=0)
    avgSpeed: Optional[float] = Field(default=None, ge=0)
    maxSpeed: Optional[float] = Field(default=None, ge=0)
    totalCalories: Optional[int] = Field(default=None, ge=0)
    totalAscent: Optional[float] = Field(default=None, ge=0)
    totalDescent: Optional[float] = Field(default=None, ge=0)

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class Lap(BaseModel):
    startTime: datetime
    totalElapsedTime: float = Field(..., ge=0)
    totalTimerTime: Optional[float] = Field(default=None, ge=0)
    totalDistance: Optional[float] = Field(default=None, ge=0)
    sport: Optional[str] = None
    avgHeartRate: Optional[int] = Field(default=None, ge=0, le=300)
    maxHeartRate: Optional[int] = Field(default=None, ge=0, le=300)
    avgCadence: Optional[float] = Field(default=None, ge=0)
    maxCadence: Optional[float] = Field(default=None, ge=0)
    avgPower: Optional[float] = Field(default=None, ge=0)
    maxPower: Optional[float] = Field(default=None, ge=0)
    avgSpeed: Optional[float] = Field(default=None, ge=0)
    maxSpeed: Optional[float] = Field(default=None, ge=0)
    totalCalories: Optional[int] = Field(default=None, ge=0)
    trigger: Optional[str] = None

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class Record(BaseModel):
    """One time-series sample."""

    timestamp: datetime
    position: Optional[Position] = None
    altitude: Optional[float] = None
    heartRate: Optional[int] = Field(default=None, ge=0, le=300)
    cadence: Optional[float] = Field(default=None, ge=0)
    power: Optional[float] = Field(default=None, ge=0)
    speed: Optional[float] = Field(default=None, ge=0)
    distance: Optional[float] = Field(default=None, ge=0)
    temperature: Optional[float] = None

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class Event(BaseModel):
    timestamp: datetime
    eventType: str = Field(..., min_length=1)
    data: Optional[int] = None

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}
