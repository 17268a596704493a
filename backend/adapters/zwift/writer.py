"""
Canonical record -> Zwift workout (.zwo).

Zwift only knows power as a fraction of FTP, so absolute watts are converted
with an assumed FTP and zones with a representative percent per zone; both
are lossy and logged. A two-step RepetitionBlock becomes IntervalsT, any other
block is unrolled. Steps without a usable duration become FreeRide segments of
a fixed length.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional
from xml.etree.ElementTree import Element, SubElement

from backend.adapters.xml_utils import format_number
from backend.adapters.zwift import mappings
from backend.adapters.zwift.validator import ZwiftValidator
from domain.exceptions import FieldError, ValidationError, ZwiftValidationError
from domain.models import CanonicalRecord, RepetitionBlock, Workout, WorkoutStep
from domain.validation import SchemaValidator, extract_workout

logger = logging.getLogger(__name__)

DEFAULT_ASSUMED_FTP = 250
DEFAULT_FREE_RIDE_SECONDS = 300


class ZwiftWriter:
    """Serializes canonical workouts to .zwo text."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        xml_validator: Optional[ZwiftValidator] = None,
        assumed_ftp: float = DEFAULT_ASSUMED_FTP,
        free_ride_seconds: float = DEFAULT_FREE_RIDE_SECONDS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._xml_validator = xml_validator or ZwiftValidator()
        self._assumed_ftp = assumed_ftp
        self._free_ride_seconds = free_ride_seconds
        self._logger = logger or logging.getLogger(__name__)

    def write(self, record: CanonicalRecord) -> str:
        record = self._schema_validator.validate_or_fail(record)
        workout = extract_workout(record)
        if workout is None:
            raise ValidationError(
                "Record has no workout to write as Zwift",
                [FieldError("extensions.workout", "A workout is required for Zwift output")],
            )
        zwift = record.extensions.zwift if record.extensions else None
        distance_based = self._is_distance_based(workout, zwift)

        root = Element("workout_file")
        if zwift and zwift.author:
            SubElement(root, "author").text = zwift.author
        SubElement(root, "name").text = workout.name or ""
        if zwift and zwift.description:
            SubElement(root, "description").text = zwift.description
        SubElement(root, "sportType").text = mappings.SPORT.from_canonical(workout.sport)
        if distance_based:
            SubElement(root, "durationType").text = "distance"
        if zwift and zwift.thresholdSecPerKm:
            SubElement(root, "thresholdSecPerKm").text = format_number(zwift.thresholdSecPerKm)
        if zwift and zwift.tags:
            tags = SubElement(root, "tags")
            for tag in zwift.tags:
                SubElement(tags, "tag", {"name": tag})

        segments = SubElement(root, "workout")
        for entry in workout.steps:
            if isinstance(entry, RepetitionBlock):
                self._block(segments, entry, workout.sport, distance_based)
            else:
                self._segment(segments, entry, workout.sport, distance_based)

        xml = ET.tostring(root, encoding="unicode")
        result = self._xml_validator.validate(xml)
        if not result.valid:
            raise ZwiftValidationError("Generated Zwift workout failed validation", result.errors)
        self._logger.debug(
            "Wrote Zwift workout",
            extra={"format": "zwift", "segmentCount": len(segments)},
        )
        return xml

    @staticmethod
    def _is_distance_based(workout: Workout, zwift) -> bool:
        if zwift and zwift.durationType:
            return zwift.durationType == "distance"
        kinds = {step.duration.type for step in workout.iter_steps()}
        return "distance" in kinds and "time" not in kinds

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    def _block(
        self, parent: Element, block: RepetitionBlock, sport: str, distance_based: bool
    ) -> None:
        if len(block.steps) == 2:
            on, off = block.steps
            on_attrs = self._attributes(on, sport, distance_based)
            off_attrs = self._attributes(off, sport, distance_based)
            on_power = self._single_power(on_attrs)
            off_power = self._single_power(off_attrs)
            if on_power is not None and off_power is not None:
                attrs = {
                    "Repeat": str(block.repeatCount),
                    "OnDuration": on_attrs["Duration"],
                    "OffDuration": off_attrs["Duration"],
                    "OnPower": on_power,
                    "OffPower": off_power,
                }
                if "Cadence" in on_attrs:
                    attrs["Cadence"] = on_attrs["Cadence"]
                if "Cadence" in off_attrs:
                    attrs["CadenceResting"] = off_attrs["Cadence"]
                element = SubElement(parent, "IntervalsT", attrs)
                self._text_events(element, on)
                return

        self._logger.warning(
            "Repetition block unrolled for Zwift output",
            extra={"format": "zwift", "iterations": block.repeatCount, "stepCount": len(block.steps)},
        )
        for _ in range(block.repeatCount):
            for step in block.steps:
                self._segment(parent, step, sport, distance_based)

    @staticmethod
    def _single_power(attrs: Dict[str, str]) -> Optional[str]:
        if "Power" in attrs:
            return attrs["Power"]
        if attrs.get("PowerLow") is not None and attrs.get("PowerLow") == attrs.get("PowerHigh"):
            return attrs["PowerLow"]
        return None

    def _segment(self, parent: Element, step: WorkoutStep, sport: str, distance_based: bool) -> None:
        attrs = self._attributes(step, sport, distance_based)
        zwift = (step.extensions or {}).get("zwift") or {}

        if "PowerLow" in attrs:
            if step.intensity == "warmup":
                tag = "Warmup"
            elif step.intensity == "cooldown":
                tag = "Cooldown"
            else:
                tag = "Ramp"
        elif "Power" in attrs:
            if step.intensity in ("warmup", "cooldown"):
                attrs["PowerLow"] = attrs["PowerHigh"] = attrs.pop("Power")
                tag = "Warmup" if step.intensity == "warmup" else "Cooldown"
            else:
                tag = "SteadyState"
        elif "pace" in attrs:
            tag = "SteadyState"
        else:
            tag = zwift.get("segment") if zwift.get("segment") in mappings.OPEN_SEGMENTS else "FreeRide"

        element = SubElement(parent, tag, attrs)
        self._text_events(element, step)

    def _attributes(self, step: WorkoutStep, sport: str, distance_based: bool) -> Dict[str, str]:
        attrs: Dict[str, str] = {"Duration": self._duration(step, distance_based)}
        zwift = (step.extensions or {}).get("zwift") or {}
        target = step.target
        value = getattr(target, "value", None)

        cadence = zwift.get("cadence")
        if target.type == "power":
            low, high = self._power_fractions(step)
            if zwift.get("descending"):
                low, high = high, low
            if value.unit == "range":
                attrs["PowerLow"] = format_number(low)
                attrs["PowerHigh"] = format_number(high)
            else:
                attrs["Power"] = format_number(low)
        elif target.type == "pace":
            speed = self._pace_speed(step)
            if speed:
                attrs["pace"] = format_number(round(1000 / speed, 2))
        elif target.type == "cadence":
            cadence = value.value if value.unit == "rpm" else (value.min + value.max) / 2
        elif target.type != "open":
            self._logger.warning(
                f"Target '{target.type}' is not supported by Zwift and is dropped",
                extra={"format": "zwift", "stepIndex": step.stepIndex},
            )

        if cadence is not None:
            if sport == "running":
                cadence = cadence * mappings.RUNNING_CADENCE_FACTOR
            attrs["Cadence"] = format_number(round(cadence))
        return attrs

    def _duration(self, step: WorkoutStep, distance_based: bool) -> str:
        duration = step.duration
        if duration.type == "time" and not distance_based:
            return format_number(duration.seconds)
        if duration.type == "distance" and distance_based:
            return format_number(duration.meters)
        if duration.type != "open":
            self._logger.warning(
                f"Duration '{duration.type}' is not supported by Zwift, using free ride length",
                extra={"format": "zwift", "stepIndex": step.stepIndex},
            )
        return format_number(self._free_ride_seconds)

    def _power_fractions(self, step: WorkoutStep):
        """(low, high) as fractions of FTP."""
        value = step.target.value
        if value.unit == "zone":
            percent = mappings.POWER_ZONE_PERCENT.get(value.value, 100.0)
            self._logger.warning(
                f"Power zone {value.value} written as {percent:.0f}% FTP",
                extra={"format": "zwift", "stepIndex": step.stepIndex},
            )
            return (mappings.percent_to_fraction(percent),) * 2

        if value.unit == "range":
            low, high = value.min, value.max
            in_watts = step.power_range_unit == "watts"
        else:
            low = high = value.value
            in_watts = value.unit == "watts"
        if in_watts:
            self._logger.warning(
                f"Power in watts converted with assumed FTP {self._assumed_ftp:.0f}W",
                extra={"format": "zwift", "stepIndex": step.stepIndex},
            )
            low = low / self._assumed_ftp * 100
            high = high / self._assumed_ftp * 100
        return mappings.percent_to_fraction(low), mappings.percent_to_fraction(high)

    def _pace_speed(self, step: WorkoutStep) -> Optional[float]:
        value = step.target.value
        if value.unit == "mps":
            return value.value
        if value.unit == "range" and value.max > 0:
            self._logger.warning(
                "Pace range written as its midpoint",
                extra={"format": "zwift", "stepIndex": step.stepIndex},
            )
            return (value.min + value.max) / 2
        self._logger.warning(
            "Pace zones are not supported by Zwift and are dropped",
            extra={"format": "zwift", "stepIndex": step.stepIndex},
        )
        return None

    @staticmethod
    def _text_events(element: Element, step: WorkoutStep) -> None:
        events: List[Dict[str, Any]] = ((step.extensions or {}).get("zwift") or {}).get("textEvents") or []
        for event in events:
            SubElement(
                element,
                "textevent",
                {"timeoffset": format_number(event.get("timeoffset", 0)), "message": str(event.get("message", ""))},
            )
