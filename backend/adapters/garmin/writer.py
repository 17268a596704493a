"""
Canonical record -> Garmin Connect workout JSON (GCN).

Output is a single workout segment. Step orders run from 1; a
RepetitionBlock becomes one RepeatGroupDTO taking the next order, its
children numbered after it.
"""

import json
import logging
from typing import Any, Dict, Optional

from backend.adapters.garmin import mappings
from domain.exceptions import FieldError, ValidationError
from domain.flattening import OrderedGroup, OrderedStep, number_canonical_steps
from domain.models import CanonicalRecord, WorkoutStep
from domain.validation import SchemaValidator, extract_workout

logger = logging.getLogger(__name__)

DEFAULT_WORKOUT_NAME = "Structured Workout"

_CONDITION_VALUE_FIELDS = {
    "time": "seconds",
    "distance": "meters",
    "calories": "calories",
    "heart_rate_less_than": "bpm",
    "power_less_than": "watts",
    "power_greater_than": "watts",
}


class GarminWriter:
    """Serializes canonical workouts to GCN JSON text."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        default_workout_name: str = DEFAULT_WORKOUT_NAME,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._default_workout_name = default_workout_name
        self._logger = logger or logging.getLogger(__name__)

    def write(self, record: CanonicalRecord) -> str:
        record = self._schema_validator.validate_or_fail(record)
        workout = extract_workout(record)
        if workout is None:
            raise ValidationError(
                "Record has no workout to write as GCN",
                [FieldError("extensions.structured_workout", "A workout is required for GCN output")],
            )

        sport_type = mappings.sport_type(mappings.SPORT.from_canonical(workout.sport))
        workout_steps = []
        for entry in number_canonical_steps(workout.steps, start=1):
            if isinstance(entry, OrderedGroup):
                workout_steps.append(
                    {
                        "type": "RepeatGroupDTO",
                        "stepOrder": entry.order,
                        "stepType": mappings.step_type("repeat"),
                        "numberOfIterations": entry.block.repeatCount,
                        "endCondition": mappings.condition("iterations"),
                        "endConditionValue": entry.block.repeatCount,
                        "workoutSteps": [self._step(child) for child in entry.children],
                    }
                )
            else:
                workout_steps.append(self._step(entry))

        name = (workout.name or self._default_workout_name)[: mappings.MAX_WORKOUT_NAME_LENGTH]
        payload: Dict[str, Any] = {"workoutName": name, "sportType": sport_type}
        garmin = (record.extensions.garmin if record.extensions else None) or {}
        if garmin.get("description"):
            payload["description"] = garmin["description"]
        payload["workoutSegments"] = [
            {"segmentOrder": 1, "sportType": sport_type, "workoutSteps": workout_steps}
        ]
        if workout.poolLength:
            payload["poolLength"] = workout.poolLength
            payload["poolLengthUnit"] = dict(mappings.POOL_LENGTH_UNIT)

        self._logger.debug(
            "Wrote GCN workout",
            extra={"format": "garmin", "stepCount": workout.step_count},
        )
        return json.dumps(payload, indent=2)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _step(self, ordered: OrderedStep) -> Dict[str, Any]:
        step = ordered.step
        condition_key, condition_value = self._condition(step)
        target_key, one, two, zone = self._target(step)
        stroke_key = (
            mappings.binary_to_stroke_key(step.target.value.value)
            if step.target.type == "stroke_type"
            else mappings.STROKE.backward_default
        )

        values: Dict[str, Any] = {
            "type": "ExecutableStepDTO",
            "stepOrder": ordered.order,
            "stepType": mappings.step_type(mappings.STEP_TYPE.from_canonical(step.intensity)),
            "endCondition": mappings.condition(condition_key),
            "endConditionValue": condition_value,
            "targetType": mappings.target_type(target_key),
            "targetValueOne": one,
            "targetValueTwo": two,
            "zoneNumber": zone,
            "secondaryTargetType": None,
            "secondaryTargetValueOne": None,
            "secondaryTargetValueTwo": None,
            "secondaryZoneNumber": None,
            "strokeType": mappings.stroke_type(stroke_key),
            "equipmentType": mappings.equipment_type(mappings.EQUIPMENT.from_canonical(step.equipment)),
        }
        if step.notes:
            values["description"] = step.notes
        return values

    def _condition(self, step: WorkoutStep):
        kind = step.duration.type
        if kind == "open":
            return mappings.CONDITION.from_canonical(kind), None
        if kind not in _CONDITION_VALUE_FIELDS:
            self._logger.warning(
                f"Duration '{kind}' is not supported by GCN, writing lap.button",
                extra={"format": "garmin", "stepIndex": step.stepIndex},
            )
            return mappings.CONDITION.backward_default, None
        return (
            mappings.CONDITION.from_canonical(kind),
            getattr(step.duration, _CONDITION_VALUE_FIELDS[kind]),
        )

    def _target(self, step: WorkoutStep):
        """(target key, value one, value two, zone number)."""
        target = step.target
        key = mappings.TARGET.from_canonical(target.type)
        if target.type in ("open", "stroke_type"):
            return key, None, None, None

        value = target.value
        if value.unit == "zone":
            return key, None, None, value.value
        percent = value.unit in ("percent_ftp", "percent_max") or (
            target.type == "power" and value.unit == "range" and step.power_range_unit == "percent_ftp"
        )
        if percent:
            self._logger.warning(
                f"Relative {target.type} target is not supported by GCN, writing no.target",
                extra={"format": "garmin", "stepIndex": step.stepIndex},
            )
            return mappings.TARGET.from_canonical("open"), None, None, None
        if value.unit == "range":
            return key, value.min, value.max, None
        return key, value.value, value.value, None
