"""
Canonical record schema validation.

``validate`` reports every schema problem as a FieldError and never raises;
``validate_or_fail`` returns the parsed CanonicalRecord or raises
ValidationError carrying the same list. The checks themselves live in the
pydantic models (closed literals, regex patterns, numeric bounds); this module
only runs them and turns pydantic's error locations into dotted field paths.

Usage:
    from domain.validation import SchemaValidator

    validator = SchemaValidator()
    errors = validator.validate({"invalid": True})
    record = validator.validate_or_fail(document)
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from domain.exceptions import FieldError, ValidationError
from domain.models import CanonicalRecord, Workout

logger = logging.getLogger(__name__)

Candidate = Union[CanonicalRecord, Dict[str, Any], Any]


def _as_document(candidate: Candidate) -> Any:
    # Models are dumped and re-checked: model_copy(update=...) skips validation.
    if isinstance(candidate, CanonicalRecord):
        return candidate.model_dump(mode="json", exclude_none=True)
    return candidate


def _field_path(loc: Sequence[Union[str, int]], document: Any) -> str:
    """
    Build a dotted path from a pydantic error location.

    Locations through tagged unions carry the tag name (``step``, ``time``,
    ``range``...) as an extra segment. Segments that are not keys of the
    document at that depth and are followed by further segments are those
    tags, and are dropped.
    """
    parts: List[str] = []
    node = document
    for position, item in enumerate(loc):
        is_last = position == len(loc) - 1
        if isinstance(node, list) and isinstance(item, int) and 0 <= item < len(node):
            parts.append(str(item))
            node = node[item]
        elif isinstance(node, dict) and item in node:
            parts.append(str(item))
            node = node[item]
        elif isinstance(node, dict) and not is_last:
            continue
        else:
            parts.append(str(item))
            node = None
    return ".".join(parts)


def errors_from_pydantic(
    exc: PydanticValidationError, document: Any
) -> List[FieldError]:
    """Translate a pydantic ValidationError into FieldErrors."""
    return [
        FieldError(field=_field_path(err["loc"], document), message=err["msg"])
        for err in exc.errors()
    ]


class SchemaValidator:
    """
    Validates arbitrary candidates against the canonical record schema.

    Stateless and safe to share between conversions.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def validate(self, candidate: Candidate) -> List[FieldError]:
        """Return all schema problems; an empty list means valid."""
        document = _as_document(candidate)
        try:
            CanonicalRecord.model_validate(document)
        except PydanticValidationError as exc:
            errors = errors_from_pydantic(exc, document)
            self._logger.debug(
                "Canonical record failed validation",
                extra={"errorCount": len(errors)},
            )
            return errors
        return []

    def validate_or_fail(self, candidate: Candidate) -> CanonicalRecord:
        """Return the validated record or raise ValidationError."""
        document = _as_document(candidate)
        try:
            return CanonicalRecord.model_validate(document)
        except PydanticValidationError as exc:
            errors = errors_from_pydantic(exc, document)
            raise ValidationError("Canonical record validation failed", errors) from exc


_default_validator = SchemaValidator()


def validate(candidate: Candidate) -> List[FieldError]:
    return _default_validator.validate(candidate)


def validate_or_fail(candidate: Candidate) -> CanonicalRecord:
    return _default_validator.validate_or_fail(candidate)


def extract_workout(record: CanonicalRecord) -> Optional[Workout]:
    """
    Return the structured workout carried by a record.

    ``structured_workout`` takes precedence over ``workout``; records without
    either (e.g. recorded activities) yield None.
    """
    if record.extensions is None:
        return None
    return record.extensions.structured_workout or record.extensions.workout
