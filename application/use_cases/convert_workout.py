"""
ConvertWorkout use cases.

Every conversion goes through the canonical record:

    vendor payload --reader--> CanonicalRecord --writer--> vendor payload

ConvertToCanonicalUseCase and ConvertFromCanonicalUseCase wrap one reader or
one writer; ConvertWorkoutUseCase chains them for any pair of formats. Errors
from readers, writers and validation propagate unchanged.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from application.ports import Payload, WorkoutReader, WorkoutWriter
from domain.exceptions import ConversionError
from domain.models import CanonicalRecord
from domain.validation import SchemaValidator

logger = logging.getLogger(__name__)

RecordInput = Union[CanonicalRecord, Dict[str, Any]]


class ConversionFormat(str, Enum):
    """Supported vendor formats."""

    FIT = "fit"
    TCX = "tcx"
    ZWIFT = "zwift"
    GARMIN = "garmin"

    @property
    def is_binary(self) -> bool:
        return self is ConversionFormat.FIT

    @classmethod
    def from_extension(cls, extension: str) -> "ConversionFormat":
        """Format for a file extension (``.fit``, ``tcx``, ``.zwo``, ``.json``)."""
        key = extension.lower().lstrip(".")
        by_extension = {"fit": cls.FIT, "tcx": cls.TCX, "zwo": cls.ZWIFT, "json": cls.GARMIN, "gcn": cls.GARMIN}
        if key not in by_extension:
            raise ConversionError(
                f"Unknown file extension: {extension}. "
                f"Valid extensions: {', '.join(sorted(by_extension))}"
            )
        return by_extension[key]


class ConvertToCanonicalUseCase:
    """Reads a vendor payload into a validated canonical record."""

    def __init__(
        self,
        reader: WorkoutReader,
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._reader = reader
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def execute(self, payload: Payload) -> CanonicalRecord:
        """
        Raises:
            FormatParsingError: The payload could not be parsed
            ValidationError: The parsed record violates the canonical schema
        """
        self._logger.debug(f"Reading payload with {type(self._reader).__name__}")
        record = self._reader.read(payload)
        return self._schema_validator.validate_or_fail(record)


class ConvertFromCanonicalUseCase:
    """Validates a canonical record, then writes it with a vendor writer."""

    def __init__(
        self,
        writer: WorkoutWriter,
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._writer = writer
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def execute(self, record: RecordInput) -> Payload:
        """
        Raises:
            ValidationError: The record violates the canonical schema; the
                writer is not called
        """
        validated = self._schema_validator.validate_or_fail(record)
        self._logger.debug(f"Writing record with {type(self._writer).__name__}")
        return self._writer.write(validated)


# ---------------------------------------------------------------------------
# Per-format builders
# ---------------------------------------------------------------------------


def _to_canonical(reader, schema_validator, logger) -> ConvertToCanonicalUseCase:
    return ConvertToCanonicalUseCase(reader, schema_validator=schema_validator, logger=logger)


def _from_canonical(writer, schema_validator, logger) -> ConvertFromCanonicalUseCase:
    return ConvertFromCanonicalUseCase(writer, schema_validator=schema_validator, logger=logger)


def convert_fit_to_canonical(
    reader: WorkoutReader[bytes],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertToCanonicalUseCase:
    return _to_canonical(reader, schema_validator, logger)


def convert_canonical_to_fit(
    writer: WorkoutWriter[bytes],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertFromCanonicalUseCase:
    return _from_canonical(writer, schema_validator, logger)


def convert_tcx_to_canonical(
    reader: WorkoutReader[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertToCanonicalUseCase:
    return _to_canonical(reader, schema_validator, logger)


def convert_canonical_to_tcx(
    writer: WorkoutWriter[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertFromCanonicalUseCase:
    return _from_canonical(writer, schema_validator, logger)


def convert_zwift_to_canonical(
    reader: WorkoutReader[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertToCanonicalUseCase:
    return _to_canonical(reader, schema_validator, logger)


def convert_canonical_to_zwift(
    writer: WorkoutWriter[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertFromCanonicalUseCase:
    return _from_canonical(writer, schema_validator, logger)


def convert_garmin_to_canonical(
    reader: WorkoutReader[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertToCanonicalUseCase:
    return _to_canonical(reader, schema_validator, logger)


def convert_canonical_to_garmin(
    writer: WorkoutWriter[str],
    schema_validator: Optional[SchemaValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> ConvertFromCanonicalUseCase:
    return _from_canonical(writer, schema_validator, logger)


# ---------------------------------------------------------------------------
# Format to format
# ---------------------------------------------------------------------------


@dataclass
class ConvertWorkoutResult:
    """Result of the ConvertWorkout use case execution."""

    source_format: ConversionFormat
    target_format: ConversionFormat
    record: CanonicalRecord
    output: Payload


class ConvertWorkoutUseCase:
    """
    Converts a payload between two vendor formats via the canonical record.

    Usage:
        >>> use_case = ConvertWorkoutUseCase(readers=readers, writers=writers)
        >>> result = use_case.execute(tcx_text, "tcx", "garmin")
        >>> print(result.output)
    """

    def __init__(
        self,
        readers: Mapping[ConversionFormat, WorkoutReader],
        writers: Mapping[ConversionFormat, WorkoutWriter],
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._readers = dict(readers)
        self._writers = dict(writers)
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        payload: Payload,
        source_format: Union[ConversionFormat, str],
        target_format: Union[ConversionFormat, str],
    ) -> ConvertWorkoutResult:
        """
        Raises:
            ConversionError: Unknown format, or any reader/writer/validation
                failure (typed subclass)
        """
        source = self._format(source_format)
        target = self._format(target_format)
        if source not in self._readers:
            raise ConversionError(f"No reader configured for format: {source.value}")
        if target not in self._writers:
            raise ConversionError(f"No writer configured for format: {target.value}")

        self._logger.info(f"Converting workout from {source.value} to {target.value}")
        record = ConvertToCanonicalUseCase(
            self._readers[source], self._schema_validator, self._logger
        ).execute(payload)
        output = ConvertFromCanonicalUseCase(
            self._writers[target], self._schema_validator, self._logger
        ).execute(record)
        return ConvertWorkoutResult(
            source_format=source, target_format=target, record=record, output=output
        )

    @staticmethod
    def _format(value: Union[ConversionFormat, str]) -> ConversionFormat:
        if isinstance(value, ConversionFormat):
            return value
        try:
            return ConversionFormat(value.lower())
        except ValueError:
            valid_formats = [f.value for f in ConversionFormat]
            raise ConversionError(
                f"Unknown conversion format: {value}. "
                f"Valid formats: {', '.join(valid_formats)}"
            ) from None
