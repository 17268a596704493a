"""
FIT file -> canonical record.

Workout files (file_id.type = workout) become ``type="workout"`` records with
the steps in ``extensions.workout``. FIT expresses repetition with a
``repeat_until_steps_cmplt`` step placed after the steps it repeats; those are
rebuilt into a vendor step tree and flattened, so repeats nested in other
repeats collapse into one block. Activity and course files keep their
sessions, laps, records and events.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from application.ports import FitCodec, FitMessages
from backend.adapters.fit import mappings
from backend.adapters.fit.profile import (
    DURATION_REPEAT_UNTIL_STEPS_COMPLETE,
    HEART_RATE_CUSTOM_OFFSET,
    POWER_CUSTOM_OFFSET,
)
from domain.converters import parse_device_number
from domain.exceptions import FitParsingError
from domain.flattening import RepeatGroup, StepLeaf, VendorNode, flatten_step_tree
from domain.models import CANONICAL_VERSION, MAX_NOTES_LENGTH, CanonicalRecord
from domain.validation import SchemaValidator

logger = logging.getLogger(__name__)


def _strip_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _above_offset(value: Optional[int], offset: int) -> Tuple[Optional[float], bool]:
    """Split a FIT custom value into (value, is_absolute)."""
    if value is None:
        return None, False
    if value >= offset:
        return value - offset, True
    return value, False


def _is_percent_power_range(step: Dict[str, Any], target: Dict[str, Any]) -> bool:
    if target["type"] != "power" or target["value"]["unit"] != "range":
        return False
    low = step.get("custom_target_value_low")
    return low is not None and low < POWER_CUSTOM_OFFSET


class FitReader:
    """Reads FIT bytes through an injected codec."""

    def __init__(
        self,
        codec: FitCodec,
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._codec = codec
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def read(self, data: bytes) -> CanonicalRecord:
        try:
            messages = self._codec.decode(data)
        except ValueError as exc:
            raise FitParsingError(f"Failed to decode FIT file: {exc}", cause=exc) from exc

        file_ids = messages.get("file_id") or []
        if not file_ids:
            raise FitParsingError("FIT file has no file_id message")
        file_id = file_ids[0]
        record_type = mappings.FILE_TYPE.to_canonical(file_id.get("type"))

        document: Dict[str, Any] = {
            "version": CANONICAL_VERSION,
            "type": record_type,
            "metadata": self._metadata(file_id, messages),
        }
        if record_type == "workout":
            document["extensions"] = {"workout": self._workout(messages)}
        else:
            document.update(self._activity(messages))

        self._logger.debug(
            "Read FIT file",
            extra={"format": "fit", "recordType": record_type},
        )
        return self._schema_validator.validate_or_fail(document)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def _metadata(self, file_id: Dict[str, Any], messages: FitMessages) -> Dict[str, Any]:
        source = (messages.get("workout") or messages.get("session") or [{}])[0]
        sub_sport = source.get("sub_sport")
        created = file_id.get("time_created") or datetime.now(timezone.utc)
        return _strip_none(
            {
                "created": created.isoformat(),
                "sport": mappings.SPORT.to_canonical(source.get("sport")),
                "subSport": mappings.SUB_SPORT.to_canonical(sub_sport) if sub_sport is not None else None,
                "manufacturer": mappings.manufacturer_name(file_id.get("manufacturer")),
                "product": parse_device_number(file_id.get("product")),
                "serialNumber": parse_device_number(file_id.get("serial_number")),
            }
        )

    # ------------------------------------------------------------------
    # Workout
    # ------------------------------------------------------------------

    def _workout(self, messages: FitMessages) -> Dict[str, Any]:
        header = (messages.get("workout") or [None])[0]
        fit_steps = messages.get("workout_step") or []
        if header is None and not fit_steps:
            raise FitParsingError("FIT workout file has no workout or workout_step messages")
        header = header or {}

        workout = _strip_none(
            {
                "name": header.get("wkt_name"),
                "sport": mappings.SPORT.to_canonical(header.get("sport")),
                "subSport": (
                    mappings.SUB_SPORT.to_canonical(header["sub_sport"])
                    if header.get("sub_sport") is not None
                    else None
                ),
            }
        )
        if header.get("pool_length"):
            workout["poolLength"] = header["pool_length"]
            workout["poolLengthUnit"] = "meters"

        step_indexes: Dict[int, int] = {}

        def map_leaf(step: Dict[str, Any], step_index: int) -> Dict[str, Any]:
            message_index = step.get("message_index")
            if message_index is not None:
                step_indexes[message_index] = step_index
            return self._step(step, step_index, step_indexes)

        workout["steps"] = flatten_step_tree(
            self._step_tree(fit_steps), map_leaf, log=self._logger
        )
        return workout

    def _step_tree(self, fit_steps: List[Dict[str, Any]]) -> List[VendorNode]:
        ordered = sorted(
            enumerate(fit_steps),
            key=lambda item: item[1].get("message_index", item[0]),
        )
        # (first message index covered, node)
        nodes: List[Tuple[int, VendorNode]] = []
        for position, step in ordered:
            index = step.get("message_index", position)
            if step.get("duration_type") != DURATION_REPEAT_UNTIL_STEPS_COMPLETE:
                nodes.append((index, StepLeaf(step)))
                continue
            repeat_from = step.get("duration_value") or 0
            children = [(first, node) for first, node in nodes if first >= repeat_from]
            if not children:
                self._logger.warning(
                    "Repeat step without preceding steps ignored",
                    extra={"messageIndex": index},
                )
                continue
            nodes = [(first, node) for first, node in nodes if first < repeat_from]
            group = RepeatGroup(
                iterations=step.get("target_value") or 1,
                children=[node for _, node in children],
            )
            nodes.append((children[0][0], group))
        return [node for _, node in nodes]

    def _step(
        self, step: Dict[str, Any], step_index: int, step_indexes: Dict[int, int]
    ) -> Dict[str, Any]:
        duration = self._duration(step, step_indexes)
        target = self._target(step)
        result: Dict[str, Any] = {
            "stepIndex": step_index,
            "durationType": duration["type"],
            "duration": duration,
            "targetType": target["type"],
            "target": target,
            "intensity": mappings.INTENSITY.to_canonical(step.get("intensity")),
        }
        if step.get("wkt_step_name"):
            result["name"] = step["wkt_step_name"]
        if step.get("notes"):
            result["notes"] = step["notes"][:MAX_NOTES_LENGTH]
        equipment = step.get("equipment")
        if equipment is not None and mappings.EQUIPMENT.to_canonical(equipment) != "none":
            result["equipment"] = mappings.EQUIPMENT.to_canonical(equipment)
        if _is_percent_power_range(step, target):
            result["extensions"] = {"fit": {"powerUnit": "percent_ftp"}}
        return result

    def _duration(
        self, step: Dict[str, Any], step_indexes: Dict[int, int]
    ) -> Dict[str, Any]:
        kind = mappings.DURATION_TYPE.to_canonical(step.get("duration_type"))
        value = step.get("duration_value")
        target_value = step.get("target_value")

        if kind == "time" and value:
            return {"type": "time", "seconds": value / 1000}
        if kind == "distance" and value:
            return {"type": "distance", "meters": value / 100}
        if kind == "calories" and value:
            return {"type": "calories", "calories": value}
        if kind == "heart_rate_less_than" and value:
            bpm, _ = _above_offset(value, HEART_RATE_CUSTOM_OFFSET)
            return {"type": kind, "bpm": int(bpm)} if bpm else {"type": "open"}
        if kind in ("power_less_than", "power_greater_than") and value:
            watts, _ = _above_offset(value, POWER_CUSTOM_OFFSET)
            return {"type": kind, "watts": watts} if watts else {"type": "open"}
        if kind.startswith("repeat_until_") and target_value:
            repeat_from = step_indexes.get(value or 0, 0)
            if kind == "repeat_until_time":
                return {"type": kind, "seconds": target_value / 1000, "repeatFrom": repeat_from}
            if kind == "repeat_until_distance":
                return {"type": kind, "meters": target_value / 100, "repeatFrom": repeat_from}
            if kind == "repeat_until_calories":
                return {"type": kind, "calories": target_value, "repeatFrom": repeat_from}
            if "heart_rate" in kind:
                bpm, _ = _above_offset(target_value, HEART_RATE_CUSTOM_OFFSET)
                return {"type": kind, "bpm": int(bpm), "repeatFrom": repeat_from}
            watts, _ = _above_offset(target_value, POWER_CUSTOM_OFFSET)
            return {"type": kind, "watts": watts, "repeatFrom": repeat_from}
        return {"type": "open"}

    def _target(self, step: Dict[str, Any]) -> Dict[str, Any]:
        kind = mappings.TARGET_TYPE.to_canonical(step.get("target_type"))
        zone = step.get("target_value")
        low = step.get("custom_target_value_low")
        high = step.get("custom_target_value_high")
        has_custom = low is not None or high is not None
        if has_custom:
            low = low if low is not None else high
            high = high if high is not None else low
            if low > high:
                low, high = high, low

        if kind == "power":
            if zone:
                return {"type": "power", "value": {"unit": "zone", "value": zone}}
            if has_custom:
                low_value, absolute = _above_offset(low, POWER_CUSTOM_OFFSET)
                high_value, _ = _above_offset(high, POWER_CUSTOM_OFFSET)
                if low == high:
                    unit = "watts" if absolute else "percent_ftp"
                    return {"type": "power", "value": {"unit": unit, "value": low_value}}
                return {"type": "power", "value": {"unit": "range", "min": low_value, "max": high_value}}
        elif kind == "heart_rate":
            if zone:
                return {"type": "heart_rate", "value": {"unit": "zone", "value": zone}}
            if has_custom:
                low_value, absolute = _above_offset(low, HEART_RATE_CUSTOM_OFFSET)
                high_value, _ = _above_offset(high, HEART_RATE_CUSTOM_OFFSET)
                if low == high:
                    unit = "bpm" if absolute else "percent_max"
                    return {"type": "heart_rate", "value": {"unit": unit, "value": low_value}}
                return {"type": "heart_rate", "value": {"unit": "range", "min": low_value, "max": high_value}}
        elif kind == "pace":
            if zone:
                return {"type": "pace", "value": {"unit": "zone", "value": zone}}
            if has_custom and high:
                if low == high:
                    return {"type": "pace", "value": {"unit": "mps", "value": low / 1000}}
                return {"type": "pace", "value": {"unit": "range", "min": low / 1000, "max": high / 1000}}
        elif kind == "cadence":
            if has_custom:
                if low == high:
                    return {"type": "cadence", "value": {"unit": "rpm", "value": low}}
                return {"type": "cadence", "value": {"unit": "range", "min": low, "max": high}}
            if zone:
                return {"type": "cadence", "value": {"unit": "rpm", "value": zone}}
        elif kind == "stroke_type" and zone is not None:
            stroke = mappings.STROKE.from_canonical(mappings.STROKE.to_canonical(zone))
            return {"type": "stroke_type", "value": {"unit": "swim_stroke", "value": stroke}}
        return {"type": "open"}

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def _activity(self, messages: FitMessages) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        sessions = [self._summary(m, is_session=True) for m in messages.get("session", [])]
        laps = [self._summary(m, is_session=False) for m in messages.get("lap", [])]
        records = [self._record(m) for m in messages.get("record", []) if m.get("timestamp")]
        events = [self._event(m) for m in messages.get("event", []) if m.get("timestamp")]
        for key, values in (
            ("sessions", [s for s in sessions if s]),
            ("laps", [lap for lap in laps if lap]),
            ("records", records),
            ("events", events),
        ):
            if values:
                result[key] = values
        return result

    def _summary(self, message: Dict[str, Any], is_session: bool) -> Optional[Dict[str, Any]]:
        start = message.get("start_time") or message.get("timestamp")
        if start is None:
            self._logger.warning("Summary message without start time skipped")
            return None
        values = {
            "startTime": start.isoformat(),
            "totalElapsedTime": message.get("total_elapsed_time") or 0,
            "totalTimerTime": message.get("total_timer_time"),
            "totalDistance": message.get("total_distance"),
            "avgHeartRate": message.get("avg_heart_rate"),
            "maxHeartRate": message.get("max_heart_rate"),
            "avgCadence": message.get("avg_cadence"),
            "maxCadence": message.get("max_cadence"),
            "avgPower": message.get("avg_power"),
            "maxPower": message.get("max_power"),
            "avgSpeed": message.get("avg_speed"),
            "maxSpeed": message.get("max_speed"),
            "totalCalories": message.get("total_calories"),
        }
        sport = message.get("sport")
        if is_session:
            values["sport"] = mappings.SPORT.to_canonical(sport)
            if message.get("sub_sport") is not None:
                values["subSport"] = mappings.SUB_SPORT.to_canonical(message["sub_sport"])
            values["totalAscent"] = message.get("total_ascent")
            values["totalDescent"] = message.get("total_descent")
        else:
            if sport is not None:
                values["sport"] = mappings.SPORT.to_canonical(sport)
            if message.get("lap_trigger") is not None:
                values["trigger"] = mappings.LAP_TRIGGER.to_canonical(message["lap_trigger"])
        return _strip_none(values)

    @staticmethod
    def _record(message: Dict[str, Any]) -> Dict[str, Any]:
        values = {
            "timestamp": message["timestamp"].isoformat(),
            "altitude": message.get("altitude"),
            "heartRate": message.get("heart_rate"),
            "cadence": message.get("cadence"),
            "power": message.get("power"),
            "speed": message.get("speed"),
            "distance": message.get("distance"),
            "temperature": message.get("temperature"),
        }
        lat, lon = message.get("position_lat"), message.get("position_long")
        if lat is not None and lon is not None:
            values["position"] = {"lat": lat, "lon": lon}
        return _strip_none(values)

    @staticmethod
    def _event(message: Dict[str, Any]) -> Dict[str, Any]:
        return _strip_none(
            {
                "timestamp": message["timestamp"].isoformat(),
                "eventType": mappings.EVENT_TYPE.to_canonical(message.get("event_type")),
                "data": message.get("data"),
            }
        )
