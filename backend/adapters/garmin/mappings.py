"""
Garmin Connect (GCN) key tables.

Backed by ``shared/dictionaries/garmin.yaml``. GCN identifies each enumerated
value by a key plus a numeric id; writers emit both.
"""

from typing import Any, Dict, Optional

from backend.adapters.dictionaries import LookupTable, load_dictionary
from backend.adapters.fit import mappings as fit_mappings

SPORT = LookupTable.from_dictionary("garmin", "sport")
STEP_TYPE = LookupTable.from_dictionary("garmin", "step_type")
CONDITION = LookupTable.from_dictionary("garmin", "condition")
TARGET = LookupTable.from_dictionary("garmin", "target")
STROKE = LookupTable.from_dictionary("garmin", "stroke")
EQUIPMENT = LookupTable.from_dictionary("garmin", "equipment")

MAX_WORKOUT_NAME_LENGTH = 255
POOL_LENGTH_UNIT = {"unitId": 1, "unitKey": "meter", "factor": 100.0}


def _ids(table: str) -> Dict[str, int]:
    return load_dictionary("garmin")[table]


def sport_type(key: str) -> Dict[str, Any]:
    sport_id = _ids("sport_ids").get(key, _ids("sport_ids")["other"])
    return {"sportTypeId": sport_id, "sportTypeKey": key, "displayOrder": sport_id}


def step_type(key: str) -> Dict[str, Any]:
    step_id = _ids("step_type_ids")[key]
    return {"stepTypeId": step_id, "stepTypeKey": key, "displayOrder": step_id}


def condition(key: str) -> Dict[str, Any]:
    condition_id = _ids("condition_ids")[key]
    return {
        "conditionTypeId": condition_id,
        "conditionTypeKey": key,
        "displayOrder": condition_id,
        "displayable": key != "iterations",
    }


def target_type(key: str) -> Dict[str, Any]:
    target_id = _ids("target_ids")[key]
    return {"workoutTargetTypeId": target_id, "workoutTargetTypeKey": key, "displayOrder": target_id}


def stroke_type(key: str) -> Dict[str, Any]:
    stroke_id = _ids("stroke_ids")[key]
    return {"strokeTypeId": stroke_id, "strokeTypeKey": key, "displayOrder": stroke_id}


def equipment_type(key: Optional[str]) -> Optional[Dict[str, Any]]:
    if key is None:
        return None
    equipment_id = _ids("equipment_ids")[key]
    return {"equipmentTypeId": equipment_id, "equipmentTypeKey": key, "displayOrder": equipment_id}


def stroke_to_binary(key: Optional[str]) -> Optional[int]:
    """GCN stroke key to the binary stroke integer; None for no stroke."""
    stroke = STROKE.to_canonical(key)
    if stroke is None:
        return None
    return fit_mappings.STROKE.from_canonical(stroke)


def binary_to_stroke_key(value: int) -> str:
    return STROKE.from_canonical(fit_mappings.STROKE.to_canonical(value))
