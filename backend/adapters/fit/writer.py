"""
Canonical record -> FIT file.

Workout records are written as file_id + workout + workout_step messages.
Each RepetitionBlock becomes its child steps followed by one
``repeat_until_steps_cmplt`` step pointing back at the first child. Activity
records are written as session/lap/record/event messages.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from application.ports import FitCodec
from backend.adapters.fit import mappings
from backend.adapters.fit.profile import (
    DURATION_REPEAT_UNTIL_STEPS_COMPLETE,
    EVENT_TIMER,
    HEART_RATE_CUSTOM_OFFSET,
    POWER_CUSTOM_OFFSET,
)
from domain.converters import device_number_to_int
from domain.exceptions import FieldError, ValidationError
from domain.models import CanonicalRecord, RepetitionBlock, Workout, WorkoutStep
from domain.validation import SchemaValidator, extract_workout

logger = logging.getLogger(__name__)

Message = Tuple[str, Dict[str, Any]]
# (canonical field path, message)
Entry = Tuple[str, Message]

_MAX_PRODUCT = 0xFFFE
_MAX_SERIAL = 0xFFFFFFFE


def _encode_failure(path: str, exc: Exception) -> ValidationError:
    return ValidationError("Record cannot be encoded as FIT", [FieldError(path, str(exc))])


class FitWriter:
    """Writes FIT bytes through an injected codec."""

    def __init__(
        self,
        codec: FitCodec,
        schema_validator: Optional[SchemaValidator] = None,
        default_manufacturer: str = "garmin",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._codec = codec
        self._schema_validator = schema_validator or SchemaValidator()
        self._default_manufacturer = default_manufacturer
        self._logger = logger or logging.getLogger(__name__)

    def write(self, record: CanonicalRecord) -> bytes:
        record = self._schema_validator.validate_or_fail(record)
        entries: List[Entry] = [("metadata", ("file_id", self._file_id(record)))]

        workout = extract_workout(record)
        if workout is not None:
            key = "structured_workout" if record.extensions.structured_workout else "workout"
            entries.extend(self._workout_messages(workout, f"extensions.{key}"))
        else:
            entries.extend(self._activity_messages(record))

        self._logger.debug(
            "Writing FIT file",
            extra={"format": "fit", "messageCount": len(entries)},
        )
        try:
            return self._codec.encode([message for _, message in entries])
        except ValueError as exc:
            position = getattr(exc, "position", None)
            path = entries[position][0] if position is not None and position < len(entries) else ""
            raise _encode_failure(path, exc) from exc

    # ------------------------------------------------------------------
    # file_id
    # ------------------------------------------------------------------

    def _file_id(self, record: CanonicalRecord) -> Dict[str, Any]:
        metadata = record.metadata
        manufacturer = mappings.manufacturer_id(metadata.manufacturer)
        if manufacturer is None:
            if metadata.manufacturer:
                self._logger.warning(
                    f"Unknown manufacturer '{metadata.manufacturer}', "
                    f"using '{self._default_manufacturer}'"
                )
            manufacturer = mappings.manufacturer_id(self._default_manufacturer)

        product = device_number_to_int(metadata.product)
        serial = device_number_to_int(metadata.serialNumber)
        return {
            "type": mappings.FILE_TYPE.from_canonical(record.type),
            "manufacturer": manufacturer,
            "product": product if product is not None and product <= _MAX_PRODUCT else None,
            "serial_number": serial if serial and serial <= _MAX_SERIAL else None,
            "time_created": metadata.created,
        }

    # ------------------------------------------------------------------
    # Workout
    # ------------------------------------------------------------------

    def _workout_messages(self, workout: Workout, path: str) -> List[Entry]:
        steps: List[Tuple[str, Dict[str, Any]]] = []
        message_indexes: Dict[int, int] = {}

        for position, entry in enumerate(workout.steps):
            entry_path = f"{path}.steps.{position}"
            if isinstance(entry, RepetitionBlock):
                first = len(steps)
                for child_position, child in enumerate(entry.steps):
                    child_path = f"{entry_path}.steps.{child_position}"
                    steps.append((child_path, self._step(child, len(steps), message_indexes, child_path)))
                steps.append(
                    (
                        entry_path,
                        {
                            "message_index": len(steps),
                            "duration_type": DURATION_REPEAT_UNTIL_STEPS_COMPLETE,
                            "duration_value": first,
                            "target_value": entry.repeatCount,
                        },
                    )
                )
            else:
                steps.append((entry_path, self._step(entry, len(steps), message_indexes, entry_path)))

        header = {
            "wkt_name": workout.name,
            "sport": mappings.SPORT.from_canonical(workout.sport),
            "sub_sport": mappings.SUB_SPORT.from_canonical(workout.subSport) if workout.subSport else None,
            "num_valid_steps": len(steps),
        }
        if workout.poolLength:
            header["pool_length"] = workout.poolLength
            header["pool_length_unit"] = 0  # metric
        return [(path, ("workout", header))] + [
            (step_path, ("workout_step", step)) for step_path, step in steps
        ]

    def _step(
        self,
        step: WorkoutStep,
        message_index: int,
        message_indexes: Dict[int, int],
        path: str,
    ) -> Dict[str, Any]:
        message_indexes[step.stepIndex] = message_index
        values: Dict[str, Any] = {
            "message_index": message_index,
            "wkt_step_name": step.name,
            "intensity": mappings.INTENSITY.from_canonical(step.intensity),
            "notes": step.notes,
            "equipment": mappings.EQUIPMENT.from_canonical(step.equipment) if step.equipment else None,
        }
        try:
            values.update(self._duration(step, message_indexes))
        except OverflowError as exc:
            raise _encode_failure(f"{path}.duration", exc) from exc
        if "target_value" not in values:
            try:
                values.update(self._target(step))
            except OverflowError as exc:
                raise _encode_failure(f"{path}.target", exc) from exc
        else:
            values["target_type"] = mappings.TARGET_TYPE.from_canonical("open")
        return values

    def _duration(self, step: WorkoutStep, message_indexes: Dict[int, int]) -> Dict[str, Any]:
        duration = step.duration
        kind = duration.type
        values: Dict[str, Any] = {"duration_type": mappings.DURATION_TYPE.from_canonical(kind)}
        if kind == "time":
            values["duration_value"] = round(duration.seconds * 1000)
        elif kind == "distance":
            values["duration_value"] = round(duration.meters * 100)
        elif kind == "calories":
            values["duration_value"] = duration.calories
        elif kind == "heart_rate_less_than":
            values["duration_value"] = duration.bpm + HEART_RATE_CUSTOM_OFFSET
        elif kind in ("power_less_than", "power_greater_than"):
            values["duration_value"] = round(duration.watts) + POWER_CUSTOM_OFFSET
        elif kind.startswith("repeat_until_"):
            values["duration_value"] = message_indexes.get(duration.repeatFrom, 0)
            if kind == "repeat_until_time":
                values["target_value"] = round(duration.seconds * 1000)
            elif kind == "repeat_until_distance":
                values["target_value"] = round(duration.meters * 100)
            elif kind == "repeat_until_calories":
                values["target_value"] = duration.calories
            elif "heart_rate" in kind:
                values["target_value"] = duration.bpm + HEART_RATE_CUSTOM_OFFSET
            else:
                values["target_value"] = round(duration.watts) + POWER_CUSTOM_OFFSET
        return values

    def _target(self, step: WorkoutStep) -> Dict[str, Any]:
        target = step.target
        values: Dict[str, Any] = {"target_type": mappings.TARGET_TYPE.from_canonical(target.type)}
        if target.type == "open":
            return values
        value = target.value
        if value.unit == "zone":
            values["target_value"] = value.value
            return values
        if target.type == "stroke_type":
            values["target_value"] = value.value
            return values

        values["target_value"] = 0
        if value.unit == "range":
            low, high = value.min, value.max
        else:
            low = high = value.value

        if target.type == "power":
            absolute = value.unit == "watts" or (
                value.unit == "range" and step.power_range_unit == "watts"
            )
            offset = POWER_CUSTOM_OFFSET if absolute else 0
            low, high = round(low) + offset, round(high) + offset
        elif target.type == "heart_rate":
            offset = 0 if value.unit == "percent_max" else HEART_RATE_CUSTOM_OFFSET
            low, high = round(low) + offset, round(high) + offset
        elif target.type == "pace":
            low, high = round(low * 1000), round(high * 1000)
        else:
            low, high = round(low), round(high)
        values["custom_target_value_low"] = low
        values["custom_target_value_high"] = high
        return values

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    def _activity_messages(self, record: CanonicalRecord) -> List[Entry]:
        messages: List[Entry] = []
        for position, event in enumerate(record.events or []):
            values = {
                "timestamp": event.timestamp,
                "event": EVENT_TIMER,
                "event_type": mappings.EVENT_TYPE.from_canonical(event.eventType),
                "data": event.data,
            }
            messages.append((f"events.{position}", ("event", values)))
        for index, sample in enumerate(record.records or []):
            position = sample.position
            values = {
                "timestamp": sample.timestamp,
                "position_lat": position.lat if position else None,
                "position_long": position.lon if position else None,
                "altitude": sample.altitude,
                "heart_rate": sample.heartRate,
                "cadence": sample.cadence,
                "distance": sample.distance,
                "speed": sample.speed,
                "power": sample.power,
                "temperature": sample.temperature,
            }
            messages.append((f"records.{index}", ("record", values)))
        for position, lap in enumerate(record.laps or []):
            values = self._summary(lap)
            values["lap_trigger"] = (
                mappings.LAP_TRIGGER.from_canonical(lap.trigger) if lap.trigger else None
            )
            values["sport"] = mappings.SPORT.from_canonical(lap.sport) if lap.sport else None
            messages.append((f"laps.{position}", ("lap", values)))
        for position, session in enumerate(record.sessions or []):
            values = self._summary(session)
            values["sport"] = mappings.SPORT.from_canonical(session.sport)
            values["sub_sport"] = (
                mappings.SUB_SPORT.from_canonical(session.subSport) if session.subSport else None
            )
            values["total_ascent"] = session.totalAscent
            values["total_descent"] = session.totalDescent
            messages.append((f"sessions.{position}", ("session", values)))
        return messages

    @staticmethod
    def _summary(summary) -> Dict[str, Any]:
        return {
            "timestamp": summary.startTime,
            "start_time": summary.startTime,
            "total_elapsed_time": summary.totalElapsedTime,
            "total_timer_time": summary.totalTimerTime,
            "total_distance": summary.totalDistance,
            "total_calories": summary.totalCalories,
            "avg_speed": summary.avgSpeed,
            "max_speed": summary.maxSpeed,
            "avg_heart_rate": summary.avgHeartRate,
            "max_heart_rate": summary.maxHeartRate,
            "avg_cadence": summary.avgCadence,
            "max_cadence": summary.maxCadence,
            "avg_power": summary.avgPower,
            "max_power": summary.maxPower,
        }
