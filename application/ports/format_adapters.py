"""
Reader/Writer interfaces (ports) for vendor formats.

A Reader turns one vendor payload into a CanonicalRecord; a Writer turns a
CanonicalRecord back into a vendor payload. Binary formats exchange bytes,
text formats exchange str. Implementations live in backend/adapters.
"""

from typing import Protocol, TypeVar, Union

from domain.models import CanonicalRecord

Payload = Union[bytes, str]

PayloadT_co = TypeVar("PayloadT_co", bytes, str, covariant=True)
PayloadT_contra = TypeVar("PayloadT_contra", bytes, str, contravariant=True)


class WorkoutReader(Protocol[PayloadT_contra]):
    """Parses a vendor payload into a canonical record."""

    def read(self, payload: PayloadT_contra) -> CanonicalRecord:
        """
        Parse a vendor payload.

        Raises:
            FormatParsingError: The payload is malformed or lacks required
                structure (vendor-specific subclass)
            ValidationError: The parsed record violates the canonical schema
        """
        ...


class WorkoutWriter(Protocol[PayloadT_co]):
    """Serializes a canonical record into a vendor payload."""

    def write(self, record: CanonicalRecord) -> PayloadT_co:
        """
        Serialize a canonical record.

        Raises:
            ValidationError: The record violates the canonical schema; nothing
                is written
        """
        ...


BinaryReader = WorkoutReader[bytes]
BinaryWriter = WorkoutWriter[bytes]
TextReader = WorkoutReader[str]
TextWriter = WorkoutWriter[str]
