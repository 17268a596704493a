"""
Application use cases.

Use cases orchestrate readers, writers and validators through the ports in
``application.ports``. Dependencies are injected via constructors; concrete
wiring lives in ``backend.providers``.

Usage:
    from application.use_cases import ConvertWorkoutUseCase, ConversionFormat

    use_case = ConvertWorkoutUseCase(readers=readers, writers=writers)
    result = use_case.execute(payload, ConversionFormat.TCX, ConversionFormat.GARMIN)
"""

from application.use_cases.convert_workout import (
    ConversionFormat,
    ConvertFromCanonicalUseCase,
    ConvertToCanonicalUseCase,
    ConvertWorkoutResult,
    ConvertWorkoutUseCase,
    convert_canonical_to_fit,
    convert_canonical_to_garmin,
    convert_canonical_to_tcx,
    convert_canonical_to_zwift,
    convert_fit_to_canonical,
    convert_garmin_to_canonical,
    convert_tcx_to_canonical,
    convert_zwift_to_canonical,
)
from application.use_cases.validate_round_trip import ValidateRoundTripUseCase

__all__ = [
    # Conversion
    "ConversionFormat",
    "ConvertToCanonicalUseCase",
    "ConvertFromCanonicalUseCase",
    "ConvertWorkoutUseCase",
    "ConvertWorkoutResult",
    "convert_fit_to_canonical",
    "convert_canonical_to_fit",
    "convert_tcx_to_canonical",
    "convert_canonical_to_tcx",
    "convert_zwift_to_canonical",
    "convert_canonical_to_zwift",
    "convert_garmin_to_canonical",
    "convert_canonical_to_garmin",
    # Round trip
    "ValidateRoundTripUseCase",
]
