"""
Composition root.

Builds readers, writers and use cases from Settings. Provider functions return
port types (Protocols) so callers and tests can substitute their own
implementations.

Usage:
    from backend.providers import get_convert_workout_use_case

    result = get_convert_workout_use_case().execute(tcx_text, "tcx", "garmin")
    print(result.output)

Testing:
    settings = Settings(_env_file=None)
    use_case = get_round_trip_use_case(ConversionFormat.TCX, settings=settings)
"""

import logging
from typing import Dict, Optional

from application.ports import FitCodec, WorkoutReader, WorkoutWriter
from application.use_cases import (
    ConversionFormat,
    ConvertFromCanonicalUseCase,
    ConvertToCanonicalUseCase,
    ConvertWorkoutUseCase,
    ValidateRoundTripUseCase,
)
from backend.adapters.fit import FitFileCodec, FitReader, FitWriter
from backend.adapters.garmin import GarminReader, GarminWriter
from backend.adapters.tcx import TcxReader, TcxValidator, TcxWriter
from backend.adapters.zwift import ZwiftReader, ZwiftValidator, ZwiftWriter
from backend.settings import Settings, get_settings
from domain.validation import SchemaValidator, ToleranceChecker

logger = logging.getLogger(__name__)


# =============================================================================
# Adapter Providers
# =============================================================================


def get_fit_codec() -> FitCodec:
    return FitFileCodec()


def get_reader(
    fmt: ConversionFormat,
    schema_validator: Optional[SchemaValidator] = None,
) -> WorkoutReader:
    """Reader for one vendor format."""
    schema_validator = schema_validator or SchemaValidator()
    if fmt is ConversionFormat.FIT:
        return FitReader(get_fit_codec(), schema_validator=schema_validator)
    if fmt is ConversionFormat.TCX:
        return TcxReader(schema_validator=schema_validator)
    if fmt is ConversionFormat.ZWIFT:
        return ZwiftReader(schema_validator=schema_validator, xml_validator=ZwiftValidator())
    return GarminReader(schema_validator=schema_validator)


def get_writer(
    fmt: ConversionFormat,
    settings: Optional[Settings] = None,
    schema_validator: Optional[SchemaValidator] = None,
) -> WorkoutWriter:
    """Writer for one vendor format, configured from settings."""
    settings = settings or get_settings()
    schema_validator = schema_validator or SchemaValidator()
    if fmt is ConversionFormat.FIT:
        return FitWriter(
            get_fit_codec(),
            schema_validator=schema_validator,
            default_manufacturer=settings.fit_default_manufacturer,
        )
    if fmt is ConversionFormat.TCX:
        return TcxWriter(
            schema_validator=schema_validator,
            xml_validator=TcxValidator() if settings.tcx_validate_output else None,
        )
    if fmt is ConversionFormat.ZWIFT:
        return ZwiftWriter(
            schema_validator=schema_validator,
            xml_validator=ZwiftValidator(),
            assumed_ftp=settings.zwift_assumed_ftp,
            free_ride_seconds=settings.zwift_free_ride_seconds,
        )
    return GarminWriter(
        schema_validator=schema_validator,
        default_workout_name=settings.garmin_default_workout_name,
    )


# =============================================================================
# Use Case Providers
# =============================================================================


def get_to_canonical_use_case(fmt: ConversionFormat) -> ConvertToCanonicalUseCase:
    return ConvertToCanonicalUseCase(get_reader(fmt))


def get_from_canonical_use_case(
    fmt: ConversionFormat, settings: Optional[Settings] = None
) -> ConvertFromCanonicalUseCase:
    return ConvertFromCanonicalUseCase(get_writer(fmt, settings=settings))


def get_convert_workout_use_case(settings: Optional[Settings] = None) -> ConvertWorkoutUseCase:
    settings = settings or get_settings()
    schema_validator = SchemaValidator()
    readers: Dict[ConversionFormat, WorkoutReader] = {
        fmt: get_reader(fmt, schema_validator) for fmt in ConversionFormat
    }
    writers: Dict[ConversionFormat, WorkoutWriter] = {
        fmt: get_writer(fmt, settings, schema_validator) for fmt in ConversionFormat
    }
    return ConvertWorkoutUseCase(readers, writers, schema_validator=schema_validator)


def get_round_trip_use_case(
    fmt: ConversionFormat, settings: Optional[Settings] = None
) -> ValidateRoundTripUseCase:
    settings = settings or get_settings()
    return ValidateRoundTripUseCase(
        reader=get_reader(fmt),
        writer=get_writer(fmt, settings=settings),
        checker=ToleranceChecker(settings.tolerances),
    )
