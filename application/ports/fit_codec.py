"""
FIT codec interface (port).

The byte-level FIT container is handled by a codec collaborator. The FIT
reader and writer only see logical messages keyed by profile name, with
physical values (seconds, meters, datetimes) rather than raw integers.
"""

from typing import Any, Dict, List, Protocol, Sequence, Tuple

FitMessages = Dict[str, List[Dict[str, Any]]]


class FitCodec(Protocol):
    def decode(self, data: bytes) -> FitMessages:
        """
        Decode a FIT file into messages grouped by name, in file order.

        Raises:
            ValueError: The data is not a structurally valid FIT file
        """
        ...

    def encode(self, messages: Sequence[Tuple[str, Dict[str, Any]]]) -> bytes:
        """
        Encode ``(message name, field values)`` pairs in order.

        Raises:
            ValueError: A message or value cannot be represented
        """
        ...
