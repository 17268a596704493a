"""
Structural validation of Zwift workout files.

A valid file has a ``workout_file`` root, a ``workout`` element whose children
are known segments, and numeric segment attributes.
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from application.ports import XmlValidationResult
from backend.adapters.xml_utils import child, child_text, parse_float
from backend.adapters.zwift.mappings import SEGMENTS
from domain.exceptions import FieldError

logger = logging.getLogger(__name__)

NUMERIC_ATTRIBUTES = (
    "Duration",
    "OnDuration",
    "OffDuration",
    "Power",
    "PowerLow",
    "PowerHigh",
    "OnPower",
    "OffPower",
    "Repeat",
    "Cadence",
    "CadenceResting",
    "pace",
)
POSITIVE_ATTRIBUTES = ("Duration", "OnDuration", "OffDuration", "Repeat")


class ZwiftValidator:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def validate(self, xml: str) -> XmlValidationResult:
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as exc:
            return XmlValidationResult(valid=False, errors=[FieldError("", f"Malformed XML: {exc}")])

        errors: List[FieldError] = []
        if root.tag != "workout_file":
            errors.append(FieldError("workout_file", f"Unexpected root element '{root.tag}'"))
            return XmlValidationResult(valid=False, errors=errors)

        sport = child_text(root, "sportType")
        if sport is not None and sport.lower() not in ("bike", "run"):
            errors.append(FieldError("sportType", f"Invalid sport type '{sport}'"))
        duration_type = child_text(root, "durationType")
        if duration_type is not None and duration_type not in ("time", "distance"):
            errors.append(FieldError("durationType", f"Invalid duration type '{duration_type}'"))

        workout = child(root, "workout")
        if workout is None:
            errors.append(FieldError("workout", "workout element is required"))
        else:
            for index, segment in enumerate(workout):
                path = f"workout[{index}]"
                if segment.tag not in SEGMENTS:
                    errors.append(FieldError(path, f"Unknown segment '{segment.tag}'"))
                    continue
                for name in NUMERIC_ATTRIBUTES:
                    raw = segment.get(name)
                    if raw is None:
                        continue
                    number = parse_float(raw)
                    if number is None:
                        errors.append(FieldError(f"{path}.{name}", f"'{raw}' is not a finite number"))
                        continue
                    if number < 0 or (name in POSITIVE_ATTRIBUTES and number <= 0):
                        errors.append(FieldError(f"{path}.{name}", f"{name} must be positive"))

        if errors:
            self._logger.debug(
                "Zwift workout failed validation",
                extra={"format": "zwift", "errorCount": len(errors)},
            )
        return XmlValidationResult(valid=not errors, errors=errors)
