"""
XML validator interface (port).

Vendor XML readers consult a validator before parsing input and writers
consult it after generating output.
"""

from dataclasses import dataclass, field
from typing import List, Protocol

from domain.exceptions import FieldError


@dataclass(frozen=True)
class XmlValidationResult:
    valid: bool
    errors: List[FieldError] = field(default_factory=list)


class XmlValidator(Protocol):
    def validate(self, xml: str) -> XmlValidationResult:
        """Check a document; never raises for invalid content."""
        ...
