"""
Validation for canonical records.

- schema_validator: structural schema checks (validate / validate_or_fail)
- tolerance: per-category numeric tolerance checks
- record_comparer: walks two records and collects tolerance violations
"""

from domain.validation.record_comparer import RecordComparer
from domain.validation.schema_validator import (
    SchemaValidator,
    extract_workout,
    validate,
    validate_or_fail,
)
from domain.validation.tolerance import DEFAULT_TOLERANCES, ToleranceChecker, ToleranceConfig

__all__ = [
    "SchemaValidator",
    "validate",
    "validate_or_fail",
    "extract_workout",
    "ToleranceChecker",
    "ToleranceConfig",
    "DEFAULT_TOLERANCES",
    "RecordComparer",
]
