"""
Canonical record models.

These models are the vendor-neutral intermediate representation every
conversion passes through:
- CanonicalRecord: top-level envelope (version, type, metadata, activity data,
  named extensions)
- Workout / WorkoutStep / RepetitionBlock: structured workout content
- Duration and Target variants: tagged unions describing when a step ends and
  what the athlete aims for
- Session / Lap / Record / Event: recorded activity data

Usage:
    >>> from domain.models import CanonicalRecord

    >>> record = CanonicalRecord.model_validate(document)
    >>> document = record.to_document()
"""

from domain.models.activity import Event, Lap, Position, Record, Session
from domain.models.duration import (
    CaloriesDuration,
    DistanceDuration,
    Duration,
    DurationType,
    HeartRateLessThanDuration,
    OpenDuration,
    PowerGreaterThanDuration,
    PowerLessThanDuration,
    RepeatUntilCaloriesDuration,
    RepeatUntilDistanceDuration,
    RepeatUntilHeartRateGreaterThanDuration,
    RepeatUntilHeartRateLessThanDuration,
    RepeatUntilPowerGreaterThanDuration,
    RepeatUntilPowerLessThanDuration,
    RepeatUntilTimeDuration,
    TimeDuration,
)
from domain.models.record import (
    CANONICAL_VERSION,
    CanonicalRecord,
    Extensions,
    Metadata,
    RecordType,
    ZwiftExtension,
)
from domain.models.target import (
    CadenceTarget,
    CadenceValue,
    HeartRateRangeValue,
    HeartRateTarget,
    HeartRateValue,
    OpenTarget,
    PaceTarget,
    PaceValue,
    PowerTarget,
    PowerValue,
    RangeValue,
    StrokeTypeTarget,
    StrokeValue,
    Target,
    TargetType,
    ZoneValue,
)
from domain.models.workout import (
    MAX_NOTES_LENGTH,
    Equipment,
    Intensity,
    RepetitionBlock,
    StepOrBlock,
    Workout,
    WorkoutStep,
)

__all__ = [
    # Envelope
    "CANONICAL_VERSION",
    "CanonicalRecord",
    "Extensions",
    "Metadata",
    "RecordType",
    "ZwiftExtension",
    # Workout
    "Workout",
    "WorkoutStep",
    "RepetitionBlock",
    "StepOrBlock",
    "Intensity",
    "Equipment",
    "MAX_NOTES_LENGTH",
    # Durations
    "Duration",
    "DurationType",
    "TimeDuration",
    "DistanceDuration",
    "CaloriesDuration",
    "HeartRateLessThanDuration",
    "PowerLessThanDuration",
    "PowerGreaterThanDuration",
    "RepeatUntilTimeDuration",
    "RepeatUntilDistanceDuration",
    "RepeatUntilCaloriesDuration",
    "RepeatUntilHeartRateLessThanDuration",
    "RepeatUntilHeartRateGreaterThanDuration",
    "RepeatUntilPowerLessThanDuration",
    "RepeatUntilPowerGreaterThanDuration",
    "OpenDuration",
    # Targets
    "Target",
    "TargetType",
    "OpenTarget",
    "PowerTarget",
    "HeartRateTarget",
    "CadenceTarget",
    "PaceTarget",
    "StrokeTypeTarget",
    "PowerValue",
    "HeartRateValue",
    "HeartRateRangeValue",
    "CadenceValue",
    "PaceValue",
    "StrokeValue",
    "ZoneValue",
    "RangeValue",
    # Activity
    "Session",
    "Lap",
    "Record",
    "Event",
    "Position",
]
