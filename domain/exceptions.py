"""
Conversion error taxonomy.

Every failure surfaced by readers, writers and use cases is one of the
exceptions below. Callers get either the converted value or a typed error
carrying field-level detail (path + message per problem).

Hierarchy:
    ConversionError
    ├── ValidationError            canonical record schema violation
    ├── FormatParsingError         malformed vendor payload
    │   ├── FitParsingError
    │   ├── TcxParsingError
    │   ├── ZwiftParsingError
    │   └── GarminParsingError
    ├── XmlValidationError         vendor XML failed structural validation
    │   ├── TcxValidationError
    │   └── ZwiftValidationError
    └── ToleranceExceededError     round-trip deviation over tolerance
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    """A single validation problem: dotted field path plus a human message."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


@dataclass(frozen=True)
class ToleranceViolation:
    """A numeric/temporal deviation that exceeded its category tolerance."""

    field: str
    expected: float
    actual: float
    deviation: float
    tolerance: float

    def __str__(self) -> str:
        return (
            f"{self.field}: expected {self.expected}, got {self.actual} "
            f"(deviation {self.deviation}, tolerance {self.tolerance})"
        )


class ConversionError(Exception):
    """Base class for all conversion errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ConversionError):
    """Raised when a candidate does not satisfy the canonical record schema."""

    def __init__(self, message: str, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__(message)

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        details = "; ".join(str(e) for e in self.errors)
        return f"{self.message}: {details}"


class FormatParsingError(ConversionError):
    """Raised when a vendor payload is malformed or missing required structure."""

    format_name = "vendor"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class FitParsingError(FormatParsingError):
    format_name = "fit"


class TcxParsingError(FormatParsingError):
    format_name = "tcx"


class ZwiftParsingError(FormatParsingError):
    format_name = "zwift"


class GarminParsingError(FormatParsingError):
    format_name = "garmin"


class XmlValidationError(ConversionError):
    """Raised when vendor XML fails structural validation."""

    def __init__(self, message: str, errors: Sequence[FieldError]):
        self.errors: List[FieldError] = list(errors)
        super().__init__(message)


class TcxValidationError(XmlValidationError):
    pass


class ZwiftValidationError(XmlValidationError):
    pass


class ToleranceExceededError(ConversionError):
    """Raised when a round trip drifts beyond the configured tolerances."""

    def __init__(self, message: str, violations: Sequence[ToleranceViolation]):
        self.violations: List[ToleranceViolation] = list(violations)
        super().__init__(message)
