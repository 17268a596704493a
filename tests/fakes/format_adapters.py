"""
In-memory fakes for the reader, writer and FIT codec ports.

Usage:
    from tests.fakes import FakeReader, FakeWriter

    reader = FakeReader(record)
    writer = FakeWriter(output="<xml/>")
    use_case = ConvertWorkoutUseCase({ConversionFormat.TCX: reader}, {ConversionFormat.GARMIN: writer})
    assert writer.records == [record]
"""

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from domain.models import CanonicalRecord
from domain.validation import SchemaValidator

Document = Dict[str, Any]


class FakeReader:
    """Returns a seeded record (or raises a seeded error) and records payloads."""

    def __init__(
        self,
        record: Optional[Any] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.record = record
        self.error = error
        self.payloads: List[Any] = []

    def read(self, payload: Any) -> CanonicalRecord:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.record

    def reset(self) -> None:
        self.payloads.clear()


class FakeWriter:
    """Returns a seeded payload (or raises a seeded error) and records inputs."""

    def __init__(self, output: Any = "", error: Optional[Exception] = None) -> None:
        self.output = output
        self.error = error
        self.records: List[CanonicalRecord] = []

    def write(self, record: CanonicalRecord) -> Any:
        self.records.append(record)
        if self.error is not None:
            raise self.error
        return self.output

    @property
    def called(self) -> bool:
        return bool(self.records)

    def reset(self) -> None:
        self.records.clear()


class JsonFormat:
    """
    A reader and writer pair that round-trips records through JSON text.

    ``drift`` is applied to the document on every write, which lets tests
    simulate a lossy vendor format.
    """

    def __init__(self, drift: Optional[Callable[[Document], Document]] = None) -> None:
        self._drift = drift
        self._validator = SchemaValidator()
        self.writes = 0
        self.reads = 0

    def write(self, record: CanonicalRecord) -> str:
        self.writes += 1
        document = record.to_document()
        if self._drift is not None:
            document = self._drift(document)
        return json.dumps(document)

    def read(self, payload: str) -> CanonicalRecord:
        self.reads += 1
        return self._validator.validate_or_fail(json.loads(payload))


class FakeFitCodec:
    """
    FitCodec that skips the binary container.

    ``decode`` returns the seeded messages; ``encode`` keeps what it was
    given and returns a marker payload.
    """

    def __init__(
        self,
        messages: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.messages = messages or {}
        self.error = error
        self.encoded: List[Tuple[str, Dict[str, Any]]] = []

    def decode(self, data: bytes) -> Dict[str, List[Dict[str, Any]]]:
        if self.error is not None:
            raise self.error
        return self.messages

    def encode(self, messages: Sequence[Tuple[str, Dict[str, Any]]]) -> bytes:
        self.encoded = list(messages)
        return b"FAKEFIT"

    def encoded_named(self, name: str) -> List[Dict[str, Any]]:
        return [values for message, values in self.encoded if message == name]
