"""
Application ports (interfaces).

This module exports the Protocol classes that define contracts between the
use cases and the vendor adapters that implement them.

Usage:
    from application.ports import WorkoutReader, WorkoutWriter

    def build(reader: WorkoutReader[str]) -> ConvertToCanonicalUseCase:
        ...
"""

from application.ports.fit_codec import FitCodec, FitMessages
from application.ports.format_adapters import (
    BinaryReader,
    BinaryWriter,
    Payload,
    TextReader,
    TextWriter,
    WorkoutReader,
    WorkoutWriter,
)
from application.ports.xml_validator import XmlValidationResult, XmlValidator

__all__ = [
    "WorkoutReader",
    "WorkoutWriter",
    "BinaryReader",
    "BinaryWriter",
    "TextReader",
    "TextWriter",
    "Payload",
    "XmlValidator",
    "XmlValidationResult",
    "FitCodec",
    "FitMessages",
]
