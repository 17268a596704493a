"""
Garmin Connect workout JSON (GCN) -> canonical record.

All segments are read in order with one step-index counter, so stepIndex
values run 0..n-1 across the whole workout. The record is a
``structured_workout`` with ``metadata.manufacturer = "garmin-connect"``.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from backend.adapters.garmin import mappings
from backend.adapters.garmin.schemas import ExecutableStepDTO, GarminWorkoutDTO, RepeatGroupDTO
from domain.exceptions import GarminParsingError
from domain.flattening import (
    RepeatGroup,
    StepIndexCounter,
    StepLeaf,
    VendorNode,
    flatten_step_tree,
)
from domain.models import CANONICAL_VERSION, MAX_NOTES_LENGTH, CanonicalRecord
from domain.validation import SchemaValidator

logger = logging.getLogger(__name__)

MANUFACTURER = "garmin-connect"


def _reject_constant(name: str) -> Any:
    raise GarminParsingError(f"Non-finite number {name} in GCN file")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise GarminParsingError(f"Number {text} in GCN file is out of range")
    return value


class GarminReader:
    """Parses GCN JSON text into a ``structured_workout`` canonical record."""

    def __init__(
        self,
        schema_validator: Optional[SchemaValidator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._schema_validator = schema_validator or SchemaValidator()
        self._logger = logger or logging.getLogger(__name__)

    def read(self, text: str) -> CanonicalRecord:
        try:
            payload = json.loads(text, parse_float=_finite_float, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise GarminParsingError("Invalid JSON in GCN file", cause=exc) from exc
        if not isinstance(payload, dict):
            raise GarminParsingError("GCN data is not an object")
        if not payload.get("workoutSegments"):
            raise GarminParsingError("GCN workout has no workoutSegments")

        try:
            dto = GarminWorkoutDTO.model_validate(payload)
        except PydanticValidationError as exc:
            raise GarminParsingError(f"Invalid GCN workout structure: {exc}", cause=exc) from exc

        sport_key = dto.sportType.sportTypeKey if dto.sportType else None
        sport = mappings.SPORT.to_canonical(sport_key)

        counter = StepIndexCounter()
        steps: List[Dict[str, Any]] = []
        for segment in sorted(dto.workoutSegments, key=lambda s: s.segmentOrder or 0):
            steps += flatten_step_tree(
                [_node(step) for step in segment.workoutSteps],
                self._step,
                counter=counter,
                log=self._logger,
            )

        workout: Dict[str, Any] = {"sport": sport, "steps": steps}
        if dto.workoutName:
            workout["name"] = dto.workoutName[: mappings.MAX_WORKOUT_NAME_LENGTH]
        if dto.poolLength and dto.poolLength > 0:
            workout["poolLength"] = dto.poolLength
            workout["poolLengthUnit"] = "meters"

        extensions: Dict[str, Any] = {"structured_workout": workout}
        garmin = {
            key: value
            for key, value in (
                ("workoutId", dto.workoutId),
                ("ownerId", dto.ownerId),
                ("description", dto.description),
            )
            if value is not None
        }
        if garmin:
            extensions["garmin"] = garmin

        document = {
            "version": CANONICAL_VERSION,
            "type": "structured_workout",
            "metadata": {
                "created": datetime.now(timezone.utc).isoformat(),
                "sport": sport,
                "manufacturer": MANUFACTURER,
            },
            "extensions": extensions,
        }
        self._logger.debug(
            "Read GCN workout",
            extra={"format": "garmin", "stepCount": counter.value},
        )
        return self._schema_validator.validate_or_fail(document)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _step(self, step: ExecutableStepDTO, step_index: int) -> Dict[str, Any]:
        duration = _duration(step)
        target = _target(step)

        stroke_key = step.strokeType.strokeTypeKey if step.strokeType else None
        stroke = mappings.stroke_to_binary(stroke_key)
        if stroke is not None:
            target = {"type": "stroke_type", "value": {"unit": "swim_stroke", "value": stroke}}

        result: Dict[str, Any] = {
            "stepIndex": step_index,
            "durationType": duration["type"],
            "duration": duration,
            "targetType": target["type"],
            "target": target,
            "intensity": mappings.STEP_TYPE.to_canonical(
                step.stepType.stepTypeKey if step.stepType else None
            ),
        }
        equipment = mappings.EQUIPMENT.to_canonical(
            step.equipmentType.equipmentTypeKey if step.equipmentType else None
        )
        if equipment:
            result["equipment"] = equipment
        if step.description:
            result["notes"] = step.description[:MAX_NOTES_LENGTH]
        return result


def _node(step) -> VendorNode:
    if isinstance(step, RepeatGroupDTO):
        return RepeatGroup(
            iterations=step.numberOfIterations or 1,
            children=[_node(child) for child in step.workoutSteps],
        )
    return StepLeaf(step)


def _duration(step: ExecutableStepDTO) -> Dict[str, Any]:
    key = step.endCondition.conditionTypeKey if step.endCondition else None
    kind = mappings.CONDITION.to_canonical(key)
    value = step.endConditionValue
    if kind == "open" or value is None or value <= 0:
        return {"type": "open"}
    if kind == "time":
        return {"type": "time", "seconds": value}
    if kind == "distance":
        return {"type": "distance", "meters": value}
    if kind == "calories":
        return {"type": "calories", "calories": int(value)}
    if kind == "heart_rate_less_than":
        return {"type": kind, "bpm": int(value)}
    return {"type": kind, "watts": value}


_SINGLE_UNITS = {"power": "watts", "heart_rate": "bpm", "pace": "mps", "cadence": "rpm"}


def _target_value(
    key: Optional[str], one: Optional[float], two: Optional[float], zone: Optional[int]
) -> Dict[str, Any]:
    kind = mappings.TARGET.to_canonical(key)
    if kind == "open":
        return {"type": "open"}
    if zone and kind != "cadence":
        return {"type": kind, "value": {"unit": "zone", "value": zone}}
    values = [v for v in (one, two) if v is not None]
    if not values:
        return {"type": "open"}
    low, high = min(values), max(values)
    if low == high:
        if kind == "pace" and low <= 0:
            return {"type": "open"}
        return {"type": kind, "value": {"unit": _SINGLE_UNITS[kind], "value": low}}
    return {"type": kind, "value": {"unit": "range", "min": low, "max": high}}


def _target(step: ExecutableStepDTO) -> Dict[str, Any]:
    """The primary target, or the secondary one when the primary is open."""
    primary = _target_value(
        step.targetType.workoutTargetTypeKey if step.targetType else None,
        step.targetValueOne,
        step.targetValueTwo,
        step.zoneNumber,
    )
    if primary["type"] != "open" or step.secondaryTargetType is None:
        return primary
    return _target_value(
        step.secondaryTargetType.workoutTargetTypeKey,
        step.secondaryTargetValueOne,
        step.secondaryTargetValueTwo,
        step.secondaryZoneNumber,
    )
