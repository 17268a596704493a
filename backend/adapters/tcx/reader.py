"""
TCX workout -> canonical record.

Only the first Workout under Workouts is read. Repeat_t steps become vendor
repeat groups and go through the flattening engine, so a Repeat_t nested in
another Repeat_t collapses into the outer block.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from backend.adapters.tcx import mappings
from backend.adapters.xml_utils import (
    attribute,
    child,
    child_float,
    child_text,
    children,
    find_path,
    local_name,
    xsi_type,
)
from domain.converters import parse_device_number
from domain.exceptions import TcxParsingError
from domain.flattening import RepeatGroup, StepLeaf, VendorNode, flatten_step_tree
from domain.models import CANONICAL_VERSION, MAX_NOTES_LENGTH, CanonicalRecord
from domain.validation import SchemaValidator

logger = logging.getLogger(__name__)


class TcxReader:
    """Parses TCX text into a ``type="workout"`` canonical record."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def read(self, xml: str) -> CanonicalRecord:
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as exc:
            raise TcxParsingError(f"Failed to parse TCX XML: {exc}", cause=exc) from exc

        if local_name(root.tag) != "TrainingCenterDatabase":
            raise TcxParsingError("Invalid TCX format: missing TrainingCenterDatabase element")

        workouts_element = child(root, "Workouts")
        workouts = list(children(workouts_element, "Workout")) if workouts_element is not None else []
        if not workouts:
            raise TcxParsingError("No workouts found in TCX file")
        if len(workouts) > 1:
            self._logger.warning(
                "TCX file contains multiple workouts, reading the first",
                extra={"format": "tcx", "workoutCount": len(workouts)},
            )
        workout_element = workouts[0]

        sport = mappings.SPORT.to_canonical(workout_element.get("Sport"))
        workout: Dict[str, Any] = {"sport": sport}
        name = child_text(workout_element, "Name")
        if name:
            workout["name"] = name
        tree = [self._node(step) for step in children(workout_element, "Step")]
        workout["steps"] = flatten_step_tree(
            [node for node in tree if node is not None],
            lambda element, index: self._step(element, index, sport),
            log=self._logger,
        )

        extensions: Dict[str, Any] = {"workout": workout}
        notes = child_text(workout_element, "Notes")
        if notes:
            extensions["tcx"] = {"notes": notes}

        document = {
            "version": CANONICAL_VERSION,
            "type": "workout",
            "metadata": self._metadata(root, sport),
            "extensions": extensions,
        }
        self._logger.debug(
            "Read TCX workout",
            extra={"format": "tcx", "stepCount": len(workout["steps"])},
        )
        return self._schema_validator.validate_or_fail(document)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @staticmethod
    def _metadata(root: ET.Element, sport: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "created": attribute(root, "timeCreated") or datetime.now(timezone.utc).isoformat(),
            "sport": sport,
        }
        manufacturer = attribute(root, "manufacturer")
        if manufacturer:
            metadata["manufacturer"] = manufacturer
        for key in ("product", "serialNumber"):
            value = parse_device_number(attribute(root, key))
            if value is not None:
                metadata[key] = value
        return metadata

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _node(self, element: ET.Element) -> Optional[VendorNode]:
        kind = xsi_type(element)
        if kind == "Repeat_t":
            nested = [self._node(step) for step in children(element, "Child")]
            repetitions = child_float(element, "Repetitions") or 1
            return RepeatGroup(
                iterations=int(repetitions),
                children=[node for node in nested if node is not None],
            )
        if kind not in (None, "Step_t"):
            self._logger.warning(f"Unknown TCX step type '{kind}' skipped")
            return None
        return StepLeaf(element)

    def _step(self, element: ET.Element, step_index: int, sport: str) -> Dict[str, Any]:
        duration, tcx_extras = self._duration(element)
        target = self._target(element, sport)
        step: Dict[str, Any] = {
            "stepIndex": step_index,
            "durationType": duration["type"],
            "duration": duration,
            "targetType": target["type"],
            "target": target,
            "intensity": mappings.INTENSITY.to_canonical(child_text(element, "Intensity")),
        }
        name = child_text(element, "Name")
        if name:
            step["name"] = name
        notes = child_text(element, "Notes")
        if notes:
            step["notes"] = notes[:MAX_NOTES_LENGTH]
        if tcx_extras:
            step["extensions"] = {"tcx": tcx_extras}
        return step

    def _duration(self, element: ET.Element):
        duration = child(element, "Duration")
        if duration is None:
            return {"type": "open"}, {}
        raw_type = xsi_type(duration)
        kind = mappings.DURATION.to_canonical(raw_type)

        if kind == "time":
            seconds = child_float(duration, "Seconds")
            if seconds and seconds > 0:
                return {"type": "time", "seconds": seconds}, {}
        elif kind == "distance":
            meters = child_float(duration, "Meters")
            if meters and meters > 0:
                return {"type": "distance", "meters": meters}, {}
        elif kind == "calories":
            calories = child_float(duration, "Calories")
            if calories and calories > 0:
                return {"type": "calories", "calories": int(calories)}, {}
        elif kind == "heart_rate_less_than":
            bpm = _heart_rate_value(child(duration, "HeartRate"))
            if bpm:
                return {"type": "heart_rate_less_than", "bpm": int(bpm)}, {}
        elif raw_type and raw_type.lower() == "heartrateabove_t":
            bpm = _heart_rate_value(child(duration, "HeartRate"))
            if bpm:
                return {"type": "open"}, {"heartRateAbove": int(bpm)}
        return {"type": "open"}, {}

    def _target(self, element: ET.Element, sport: str) -> Dict[str, Any]:
        target = child(element, "Target")
        kind = mappings.TARGET.to_canonical(xsi_type(target) if target is not None else None)

        if kind == "heart_rate":
            zone = child(target, "HeartRateZone")
            if zone is not None:
                if (xsi_type(zone) or "").startswith("Predefined"):
                    number = child_float(zone, "Number")
                    if number:
                        return {"type": "heart_rate", "value": {"unit": "zone", "value": int(number)}}
                else:
                    low = _heart_rate_value(child(zone, "Low"))
                    high = _heart_rate_value(child(zone, "High"))
                    value = _range_or_single(low, high, "bpm")
                    if value:
                        return {"type": "heart_rate", "value": value}
        elif kind == "pace":
            zone = child(target, "SpeedZone")
            if zone is not None:
                if (xsi_type(zone) or "").startswith("Predefined"):
                    number = child_float(zone, "Number")
                    if number:
                        return {"type": "pace", "value": {"unit": "zone", "value": int(number)}}
                else:
                    value = _range_or_single(
                        child_float(zone, "LowInMetersPerSecond"),
                        child_float(zone, "HighInMetersPerSecond"),
                        "mps",
                    )
                    if value:
                        return {"type": "pace", "value": value}
        elif kind == "cadence":
            low, high = child_float(target, "Low"), child_float(target, "High")
            if sport == "running":
                low = low / mappings.RUNNING_CADENCE_FACTOR if low is not None else None
                high = high / mappings.RUNNING_CADENCE_FACTOR if high is not None else None
            value = _range_or_single(low, high, "rpm")
            if value:
                return {"type": "cadence", "value": value}

        watts = _float_or_none(find_path(element, "Extensions", "TPX", "Watts"))
        if watts is not None:
            return {"type": "power", "value": {"unit": "watts", "value": watts}}
        return {"type": "open"}


def _float_or_none(element: Optional[ET.Element]) -> Optional[float]:
    if element is None or element.text is None:
        return None
    try:
        return float(element.text)
    except ValueError:
        return None


def _heart_rate_value(element: Optional[ET.Element]) -> Optional[float]:
    if element is None:
        return None
    return child_float(element, "Value")


def _range_or_single(
    low: Optional[float], high: Optional[float], unit: str
) -> Optional[Dict[str, Any]]:
    values: List[float] = [v for v in (low, high) if v is not None]
    if not values:
        return None
    low, high = min(values), max(values)
    if low == high:
        if unit == "mps" and low <= 0:
            return None
        return {"unit": unit, "value": low}
    return {"unit": "range", "min": low, "max": high}
