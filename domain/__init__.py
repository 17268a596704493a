"""
Domain layer for the workout conversion engine.

Pure, vendor-neutral code: the canonical record models, schema and tolerance
validation, the repetition flattening engine and the error taxonomy. Nothing
in this package knows about any vendor file format.
"""

from domain.exceptions import (
    ConversionError,
    FieldError,
    FormatParsingError,
    ToleranceExceededError,
    ToleranceViolation,
    ValidationError,
)
from domain.models import CanonicalRecord, RepetitionBlock, Workout, WorkoutStep

__all__ = [
    "CanonicalRecord",
    "RepetitionBlock",
    "Workout",
    "WorkoutStep",
    "ConversionError",
    "FieldError",
    "FormatParsingError",
    "ToleranceExceededError",
    "ToleranceViolation",
    "ValidationError",
]
