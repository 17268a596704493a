"""
ValidateRoundTrip use case.

Checks that a reader/writer pair preserves a workout within tolerance:

    from_format:    payload -> c1 -> payload' -> c2        compare c1, c2
    from_canonical: c0 -> payload -> c1 -> payload' -> c2  compare c0, c2

Inputs are never mutated and the only I/O is through the reader and writer.
"""

import logging
from typing import List, Optional

from application.ports import Payload, WorkoutReader, WorkoutWriter
from application.use_cases.convert_workout import RecordInput
from domain.exceptions import ToleranceExceededError, ToleranceViolation
from domain.models import CanonicalRecord
from domain.validation import (
    DEFAULT_TOLERANCES,
    RecordComparer,
    SchemaValidator,
    ToleranceChecker,
)

logger = logging.getLogger(__name__)


class ValidateRoundTripUseCase:
    def __init__(
        self,
        reader: WorkoutReader,
        writer: WorkoutWriter,
        checker: Optional[ToleranceChecker] = None,
        logger: Optional[logging.Logger] = None,
        schema_validator: Optional[SchemaValidator] = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._comparer = RecordComparer(checker or ToleranceChecker(DEFAULT_TOLERANCES))
        self._logger = logger or logging.getLogger(__name__)
        self._schema_validator = schema_validator or SchemaValidator()

    def from_format(self, payload: Payload) -> List[ToleranceViolation]:
        """Read, write and read again; compare the two canonical records."""
        first = self._reader.read(payload)
        second = self._cycle(first)
        return self._report(first, second, "format")

    def from_canonical(self, record: RecordInput) -> List[ToleranceViolation]:
        """Run a record through two write/read cycles; compare with the input."""
        original = self._schema_validator.validate_or_fail(record)
        second = self._cycle(self._cycle(original))
        return self._report(original, second, "canonical")

    def assert_from_format(self, payload: Payload) -> None:
        """
        Raises:
            ToleranceExceededError: At least one value drifted beyond tolerance
        """
        self._raise_on(self.from_format(payload))

    def assert_from_canonical(self, record: RecordInput) -> None:
        """
        Raises:
            ToleranceExceededError: At least one value drifted beyond tolerance
        """
        self._raise_on(self.from_canonical(record))

    def _cycle(self, record: CanonicalRecord) -> CanonicalRecord:
        return self._reader.read(self._writer.write(record))

    def _report(
        self, expected: CanonicalRecord, actual: CanonicalRecord, origin: str
    ) -> List[ToleranceViolation]:
        violations = self._comparer.compare(expected, actual)
        if violations:
            self._logger.warning(
                "Round-trip validation failed",
                extra={"origin": origin, "violationCount": len(violations)},
            )
        else:
            self._logger.info("Round-trip validation passed", extra={"origin": origin})
        return violations

    @staticmethod
    def _raise_on(violations: List[ToleranceViolation]) -> None:
        if violations:
            raise ToleranceExceededError(
                f"Round-trip validation failed with {len(violations)} violation(s)",
                violations,
            )
