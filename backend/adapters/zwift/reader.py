"""
Zwift workout (.zwo) -> canonical record.

Each segment under ``<workout>`` becomes one step, except IntervalsT which
becomes a repeat group of an on and an off step. Powers are fractions of FTP
and are carried as percent of FTP; ramps carry a percent range marked with
``extensions.zwift.powerUnit``.
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from backend.adapters.xml_utils import child, child_text, children, float_attribute, parse_float
from backend.adapters.zwift import mappings
from backend.adapters.zwift.validator import ZwiftValidator
from domain.exceptions import ZwiftParsingError, ZwiftValidationError
from domain.flattening import RepeatGroup, StepLeaf, VendorNode, flatten_step_tree
from domain.models import CANONICAL_VERSION, CanonicalRecord
from domain.validation import SchemaValidator

logger = logging.getLogger(__name__)


class ZwiftReader:
    """Parses .zwo text into a ``type="workout"`` canonical record."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        xml_validator: Optional[ZwiftValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._xml_validator = xml_validator or ZwiftValidator()
        self._logger = logger or logging.getLogger(__name__)

    def read(self, xml: str) -> CanonicalRecord:
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as exc:
            raise ZwiftParsingError(f"Failed to parse Zwift XML: {exc}", cause=exc) from exc
        if root.tag != "workout_file":
            raise ZwiftParsingError("Invalid Zwift format: missing workout_file element")

        result = self._xml_validator.validate(xml)
        if not result.valid:
            raise ZwiftValidationError("Zwift workout failed validation", result.errors)

        sport = mappings.SPORT.to_canonical(child_text(root, "sportType") or "bike")
        distance_based = child_text(root, "durationType") == "distance"

        tree: List[VendorNode] = []
        segments = child(root, "workout")
        for segment in segments if segments is not None else []:
            tree.append(self._node(segment, sport, distance_based))

        workout: Dict[str, Any] = {
            "sport": sport,
            "steps": flatten_step_tree(
                tree, lambda draft, index: {"stepIndex": index, **draft}, log=self._logger
            ),
        }
        name = child_text(root, "name")
        if name:
            workout["name"] = name

        document = {
            "version": CANONICAL_VERSION,
            "type": "workout",
            "metadata": {"created": datetime.now(timezone.utc).isoformat(), "sport": sport},
            "extensions": {"workout": workout, "zwift": self._zwift_extension(root)},
        }
        self._logger.debug(
            "Read Zwift workout",
            extra={"format": "zwift", "stepCount": len(workout["steps"])},
        )
        return self._schema_validator.validate_or_fail(document)

    @staticmethod
    def _zwift_extension(root: ET.Element) -> Dict[str, Any]:
        extension: Dict[str, Any] = {}
        for key in ("author", "description", "durationType"):
            value = child_text(root, key)
            if value:
                extension[key] = value
        threshold = child_text(root, "thresholdSecPerKm")
        if threshold:
            seconds_per_km = parse_float(threshold)
            if seconds_per_km is not None:
                extension["thresholdSecPerKm"] = seconds_per_km
            else:
                logger.warning(f"Ignoring invalid thresholdSecPerKm '{threshold}'")
        tags_element = child(root, "tags")
        if tags_element is not None:
            extension["tags"] = [
                tag.get("name") for tag in children(tags_element, "tag") if tag.get("name")
            ]
        return extension

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------

    def _node(self, segment: ET.Element, sport: str, distance_based: bool) -> VendorNode:
        if segment.tag == "IntervalsT":
            on = self._draft(
                segment,
                sport,
                distance_based,
                intensity="active",
                duration_attr="OnDuration",
                power_attr="OnPower",
                cadence_attr="Cadence",
            )
            off = self._draft(
                segment,
                sport,
                distance_based,
                intensity="recovery",
                duration_attr="OffDuration",
                power_attr="OffPower",
                cadence_attr="CadenceResting",
                with_events=False,
            )
            repeat = float_attribute(segment, "Repeat") or 1
            return RepeatGroup(iterations=int(repeat), children=[StepLeaf(on), StepLeaf(off)])

        return StepLeaf(
            self._draft(
                segment,
                sport,
                distance_based,
                intensity=mappings.INTERVAL_INTENSITY.to_canonical(segment.tag),
            )
        )

    def _draft(
        self,
        segment: ET.Element,
        sport: str,
        distance_based: bool,
        intensity: str,
        duration_attr: str = "Duration",
        power_attr: str = "Power",
        cadence_attr: str = "Cadence",
        with_events: bool = True,
    ) -> Dict[str, Any]:
        """A step document without its stepIndex."""
        zwift: Dict[str, Any] = {}
        duration = self._duration(float_attribute(segment, duration_attr), distance_based)

        cadence = float_attribute(segment, cadence_attr)
        if cadence is not None and sport == "running":
            cadence = cadence / mappings.RUNNING_CADENCE_FACTOR

        target: Dict[str, Any] = {"type": "open"}
        if segment.tag in mappings.OPEN_SEGMENTS:
            zwift["segment"] = segment.tag
        else:
            target = self._power_target(segment, power_attr, zwift)
        if target["type"] == "open":
            pace = float_attribute(segment, "pace")
            if pace:
                target = {"type": "pace", "value": {"unit": "mps", "value": 1000 / pace}}
        if cadence is not None:
            if target["type"] == "open":
                target = {"type": "cadence", "value": {"unit": "rpm", "value": cadence}}
            else:
                zwift["cadence"] = cadence

        if with_events:
            events = [
                {"timeoffset": float_attribute(event, "timeoffset") or 0, "message": event.get("message", "")}
                for event in children(segment, "textevent")
            ]
            if events:
                zwift["textEvents"] = events

        draft: Dict[str, Any] = {
            "durationType": duration["type"],
            "duration": duration,
            "targetType": target["type"],
            "target": target,
            "intensity": intensity,
        }
        if zwift:
            draft["extensions"] = {"zwift": zwift}
        return draft

    @staticmethod
    def _duration(value: Optional[float], distance_based: bool) -> Dict[str, Any]:
        if not value or value <= 0:
            return {"type": "open"}
        if distance_based:
            return {"type": "distance", "meters": value}
        return {"type": "time", "seconds": value}

    @staticmethod
    def _power_target(
        segment: ET.Element, power_attr: str, zwift: Dict[str, Any]
    ) -> Dict[str, Any]:
        power = float_attribute(segment, power_attr)
        if power is not None:
            return {
                "type": "power",
                "value": {"unit": "percent_ftp", "value": mappings.fraction_to_percent(power)},
            }
        low = float_attribute(segment, "PowerLow")
        high = float_attribute(segment, "PowerHigh")
        if low is None and high is None:
            return {"type": "open"}
        low = low if low is not None else high
        high = high if high is not None else low
        if low == high:
            return {
                "type": "power",
                "value": {"unit": "percent_ftp", "value": mappings.fraction_to_percent(low)},
            }
        zwift["powerUnit"] = "percent_ftp"
        if low > high:
            zwift["descending"] = True
            low, high = high, low
        return {
            "type": "power",
            "value": {
                "unit": "range",
                "min": mappings.fraction_to_percent(low),
                "max": mappings.fraction_to_percent(high),
            },
        }
