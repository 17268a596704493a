"""
Canonical record -> TCX workout.

The workout is written under TrainingCenterDatabase/Workouts/Workout with
StepId values from 1. Each RepetitionBlock becomes one Repeat_t whose StepId
precedes its children. Canonical kinds TCX cannot express (power zones,
percent-of-FTP, stroke targets, power and repeat-until durations) are written
as open and logged.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Optional
from xml.etree.ElementTree import Element, SubElement

from backend.adapters.tcx import mappings
from backend.adapters.tcx.validator import TcxValidator
from backend.adapters.xml_utils import format_number
from domain.exceptions import FieldError, TcxValidationError, ValidationError
from domain.flattening import OrderedGroup, OrderedStep, number_canonical_steps
from domain.models import CanonicalRecord, Metadata, Workout, WorkoutStep
from domain.validation import SchemaValidator, extract_workout

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
DEFAULT_WORKOUT_NAME = "Workout"


class TcxWriter:
    """Serializes canonical workouts to TCX text."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        xml_validator: Optional[TcxValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._xml_validator = xml_validator
        self._logger = logger or logging.getLogger(__name__)

    def write(self, record: CanonicalRecord) -> str:
        record = self._schema_validator.validate_or_fail(record)
        workout = extract_workout(record)
        if workout is None:
            raise ValidationError(
                "Record has no workout to write as TCX",
                [FieldError("extensions.workout", "A workout is required for TCX output")],
            )

        root = self._root(record.metadata)
        workout_element = SubElement(
            SubElement(root, "Workouts"),
            "Workout",
            {"Sport": mappings.SPORT.from_canonical(workout.sport)},
        )
        SubElement(workout_element, "Name").text = workout.name or DEFAULT_WORKOUT_NAME
        self._steps(workout_element, workout)

        notes = (record.extensions.tcx or {}).get("notes") if record.extensions else None
        if notes:
            SubElement(workout_element, "Notes").text = notes

        xml = XML_DECLARATION + ET.tostring(root, encoding="unicode")
        if self._xml_validator is not None:
            result = self._xml_validator.validate(xml)
            if not result.valid:
                raise TcxValidationError("Generated TCX failed validation", result.errors)
        self._logger.debug(
            "Wrote TCX workout",
            extra={"format": "tcx", "stepCount": workout.step_count},
        )
        return xml

    @staticmethod
    def _root(metadata: Metadata) -> Element:
        attributes = {
            "xmlns": mappings.TCX_NS,
            "xmlns:xsi": "http://www.w3.org/2001/XMLSchema-instance",
            "xmlns:ns3": mappings.TPX_NS,
            "xmlns:wc": mappings.METADATA_NS,
            "wc:timeCreated": metadata.created.isoformat(),
        }
        if metadata.manufacturer:
            attributes["wc:manufacturer"] = metadata.manufacturer
        if metadata.product:
            attributes["wc:product"] = metadata.product
        if metadata.serialNumber:
            attributes["wc:serialNumber"] = metadata.serialNumber
        return Element("TrainingCenterDatabase", attributes)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _steps(self, parent: Element, workout: Workout) -> None:
        for entry in number_canonical_steps(workout.steps, start=1):
            if isinstance(entry, OrderedGroup):
                repeat = SubElement(parent, "Step", {"xsi:type": "Repeat_t"})
                SubElement(repeat, "StepId").text = str(entry.order)
                SubElement(repeat, "Repetitions").text = str(entry.block.repeatCount)
                for ordered in entry.children:
                    self._step(repeat, "Child", ordered, workout.sport)
            else:
                self._step(parent, "Step", entry, workout.sport)

    def _step(self, parent: Element, tag: str, ordered: OrderedStep, sport: str) -> None:
        step = ordered.step
        element = SubElement(parent, tag, {"xsi:type": "Step_t"})
        SubElement(element, "StepId").text = str(ordered.order)
        if step.name:
            SubElement(element, "Name").text = step.name
        self._duration(element, step)
        SubElement(element, "Intensity").text = mappings.INTENSITY.from_canonical(step.intensity)
        watts = self._target(element, step, sport)
        if watts is not None:
            tpx = SubElement(SubElement(element, "Extensions"), "TPX", {"xmlns": mappings.TPX_NS})
            SubElement(tpx, "Watts").text = format_number(watts)

    def _duration(self, element: Element, step: WorkoutStep) -> None:
        duration = step.duration
        kind = duration.type
        heart_rate_above = ((step.extensions or {}).get("tcx") or {}).get("heartRateAbove")

        if kind == "open" and heart_rate_above:
            node = SubElement(element, "Duration", {"xsi:type": "HeartRateAbove_t"})
            _heart_rate(node, "HeartRate", heart_rate_above)
            return
        if kind not in ("time", "distance", "calories", "heart_rate_less_than", "open"):
            self._logger.warning(
                f"Duration '{kind}' is not supported by TCX, writing LapButton_t",
                extra={"format": "tcx", "stepIndex": step.stepIndex},
            )
            kind = "open"

        node = SubElement(element, "Duration", {"xsi:type": mappings.DURATION.from_canonical(kind)})
        if kind == "time":
            SubElement(node, "Seconds").text = str(round(duration.seconds))
        elif kind == "distance":
            SubElement(node, "Meters").text = str(round(duration.meters))
        elif kind == "calories":
            SubElement(node, "Calories").text = str(duration.calories)
        elif kind == "heart_rate_less_than":
            _heart_rate(node, "HeartRate", duration.bpm)

    def _target(self, element: Element, step: WorkoutStep, sport: str) -> Optional[float]:
        """Write the Target element; returns watts for the TPX extension, if any."""
        target = step.target
        value = getattr(target, "value", None)

        if target.type == "heart_rate" and value.unit != "percent_max":
            node = SubElement(element, "Target", {"xsi:type": "HeartRate_t"})
            if value.unit == "zone":
                zone = SubElement(node, "HeartRateZone", {"xsi:type": "PredefinedHeartRateZone_t"})
                SubElement(zone, "Number").text = str(value.value)
            else:
                low, high = _bounds(value)
                zone = SubElement(node, "HeartRateZone", {"xsi:type": "CustomHeartRateZone_t"})
                _heart_rate(zone, "Low", low)
                _heart_rate(zone, "High", high)
            return None

        if target.type == "pace":
            node = SubElement(element, "Target", {"xsi:type": "Speed_t"})
            if value.unit == "zone":
                zone = SubElement(node, "SpeedZone", {"xsi:type": "PredefinedSpeedZone_t"})
                SubElement(zone, "Number").text = str(value.value)
            else:
                low, high = _bounds(value)
                zone = SubElement(node, "SpeedZone", {"xsi:type": "CustomSpeedZone_t"})
                SubElement(zone, "LowInMetersPerSecond").text = format_number(low)
                SubElement(zone, "HighInMetersPerSecond").text = format_number(high)
            return None

        if target.type == "cadence":
            low, high = _bounds(value)
            if sport == "running":
                low, high = low * mappings.RUNNING_CADENCE_FACTOR, high * mappings.RUNNING_CADENCE_FACTOR
            node = SubElement(element, "Target", {"xsi:type": "Cadence_t"})
            SubElement(node, "Low").text = format_number(low)
            SubElement(node, "High").text = format_number(high)
            return None

        SubElement(element, "Target", {"xsi:type": "None_t"})
        if target.type == "power" and value.unit == "watts":
            return value.value
        if target.type != "open":
            self._logger.warning(
                f"Target '{target.type}' ({getattr(value, 'unit', '')}) is not supported by TCX, writing None_t",
                extra={"format": "tcx", "stepIndex": step.stepIndex},
            )
        return None


def _bounds(value):
    if value.unit == "range":
        return value.min, value.max
    return value.value, value.value


def _heart_rate(parent: Element, tag: str, bpm: float) -> None:
    node = SubElement(parent, tag, {"xsi:type": "HeartRateInBeatsPerMinute_t"})
    SubElement(node, "Value").text = str(round(bpm))
