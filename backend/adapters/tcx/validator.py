"""
Structural validation of TCX workout documents.

Checks what the reader and writer rely on rather than the full XSD: a
well-formed document, the TrainingCenterDatabase root, at least one
Workouts/Workout with a Sport and Name, typed steps, and numeric leaf
values.
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Optional

from application.ports import XmlValidationResult
from backend.adapters.xml_utils import child, child_text, children, local_name, parse_float, xsi_type
from domain.exceptions import FieldError

logger = logging.getLogger(__name__)

SPORTS = {"Running", "Biking", "Other"}
STEP_TYPES = {"Step_t", "Repeat_t"}
NUMERIC_LEAVES = {
    "Seconds",
    "Meters",
    "Calories",
    "Value",
    "Number",
    "LowInMetersPerSecond",
    "HighInMetersPerSecond",
    "Watts",
}


class TcxValidator:
    """Validates TCX text; returns every problem found instead of raising."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def validate(self, xml: str) -> XmlValidationResult:
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as exc:
            return XmlValidationResult(valid=False, errors=[FieldError("", f"Malformed XML: {exc}")])

        errors: List[FieldError] = []
        if local_name(root.tag) != "TrainingCenterDatabase":
            errors.append(
                FieldError("TrainingCenterDatabase", f"Unexpected root element '{local_name(root.tag)}'")
            )
            return XmlValidationResult(valid=False, errors=errors)

        workouts = child(root, "Workouts")
        workout_list = list(children(workouts, "Workout")) if workouts is not None else []
        if not workout_list:
            errors.append(FieldError("Workouts.Workout", "At least one workout is required"))

        for index, workout in enumerate(workout_list):
            path = f"Workouts.Workout[{index}]"
            sport = workout.get("Sport")
            if sport not in SPORTS:
                errors.append(FieldError(f"{path}.Sport", f"Invalid sport '{sport}'"))
            if child_text(workout, "Name") is None:
                errors.append(FieldError(f"{path}.Name", "Workout name is required"))
            for step_index, step in enumerate(children(workout, "Step")):
                self._check_step(step, f"{path}.Step[{step_index}]", errors)

        if errors:
            self._logger.debug(
                "TCX document failed validation",
                extra={"format": "tcx", "errorCount": len(errors)},
            )
        return XmlValidationResult(valid=not errors, errors=errors)

    def _check_step(self, step: ET.Element, path: str, errors: List[FieldError]) -> None:
        kind = xsi_type(step)
        if kind not in STEP_TYPES:
            errors.append(FieldError(f"{path}.type", f"Invalid step type '{kind}'"))
            return
        if not _is_int(child_text(step, "StepId")):
            errors.append(FieldError(f"{path}.StepId", "StepId must be an integer"))

        if kind == "Repeat_t":
            repetitions = child_text(step, "Repetitions")
            if not _is_int(repetitions) or int(repetitions) < 1:
                errors.append(FieldError(f"{path}.Repetitions", "Repetitions must be a positive integer"))
            nested = list(children(step, "Child"))
            if not nested:
                errors.append(FieldError(f"{path}.Child", "Repeat step has no children"))
            for child_index, nested_step in enumerate(nested):
                self._check_step(nested_step, f"{path}.Child[{child_index}]", errors)
            return

        for name in ("Duration", "Intensity", "Target"):
            element = child(step, name)
            if element is None:
                errors.append(FieldError(f"{path}.{name}", f"{name} is required"))
            elif name != "Intensity" and xsi_type(element) is None:
                errors.append(FieldError(f"{path}.{name}.type", f"{name} type is required"))
        for element in step.iter():
            name = local_name(element.tag) if isinstance(element.tag, str) else ""
            if name in NUMERIC_LEAVES and not _is_number(element.text):
                errors.append(FieldError(f"{path}.{name}", f"'{element.text}' is not a finite number"))


def _is_int(text: Optional[str]) -> bool:
    return text is not None and text.strip().lstrip("-").isdigit()


def _is_number(text: Optional[str]) -> bool:
    return parse_float(text) is not None
