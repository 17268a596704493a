"""
FIT profile subset.

Global message and field numbers for the messages this package reads and
writes, with base types and scale/offset. Values exchanged with the codec are
physical values: ``physical = raw / scale - offset``.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

FIT_EPOCH_OFFSET = 631065600  # seconds between 1970-01-01 and 1989-12-31
SEMICIRCLES_PER_DEGREE = 2 ** 31 / 180


@dataclass(frozen=True)
class BaseType:
    code: int
    fmt: str
    size: int
    invalid: Optional[int]


BASE_TYPES: Dict[int, BaseType] = {
    0x00: BaseType(0x00, "B", 1, 0xFF),  # enum
    0x01: BaseType(0x01, "b", 1, 0x7F),  # sint8
    0x02: BaseType(0x02, "B", 1, 0xFF),  # uint8
    0x84: BaseType(0x84, "H", 2, 0xFFFF),  # uint16
    0x85: BaseType(0x85, "i", 4, 0x7FFFFFFF),  # sint32
    0x86: BaseType(0x86, "I", 4, 0xFFFFFFFF),  # uint32
    0x07: BaseType(0x07, "s", 1, None),  # string
    0x8C: BaseType(0x8C, "I", 4, 0x00000000),  # uint32z
}

ENUM, SINT8, UINT8, UINT16, SINT32, UINT32, STRING = (
    0x00, 0x01, 0x02, 0x84, 0x85, 0x86, 0x07,
)
UINT32Z = 0x8C


@dataclass(frozen=True)
class FieldDef:
    number: int
    name: str
    base_type: int
    scale: float = 1
    offset: float = 0
    units: str = ""  # "date_time" and "semicircles" get converted


@dataclass(frozen=True)
class MessageDef:
    number: int
    name: str
    fields: Tuple[FieldDef, ...]

    def field_by_number(self, number: int) -> Optional[FieldDef]:
        for f in self.fields:
            if f.number == number:
                return f
        return None

    def field_by_name(self, name: str) -> Optional[FieldDef]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


_TIMESTAMP = FieldDef(253, "timestamp", UINT32, units="date_time")

_SUMMARY_FIELDS = (
    FieldDef(2, "start_time", UINT32, units="date_time"),
    FieldDef(7, "total_elapsed_time", UINT32, scale=1000),
    FieldDef(8, "total_timer_time", UINT32, scale=1000),
    FieldDef(9, "total_distance", UINT32, scale=100),
)

MESSAGES: Dict[int, MessageDef] = {
    m.number: m
    for m in (
        MessageDef(
            0,
            "file_id",
            (
                FieldDef(0, "type", ENUM),
                FieldDef(1, "manufacturer", UINT16),
                FieldDef(2, "product", UINT16),
                FieldDef(3, "serial_number", UINT32Z),
                FieldDef(4, "time_created", UINT32, units="date_time"),
                FieldDef(5, "number", UINT16),
                FieldDef(8, "product_name", STRING),
            ),
        ),
        MessageDef(
            26,
            "workout",
            (
                FieldDef(4, "sport", ENUM),
                FieldDef(5, "capabilities", UINT32Z),
                FieldDef(6, "num_valid_steps", UINT16),
                FieldDef(8, "wkt_name", STRING),
                FieldDef(11, "sub_sport", ENUM),
                FieldDef(14, "pool_length", UINT16, scale=100),
                FieldDef(15, "pool_length_unit", ENUM),
            ),
        ),
        MessageDef(
            27,
            "workout_step",
            (
                FieldDef(254, "message_index", UINT16),
                FieldDef(0, "wkt_step_name", STRING),
                FieldDef(1, "duration_type", ENUM),
                FieldDef(2, "duration_value", UINT32),
                FieldDef(3, "target_type", ENUM),
                FieldDef(4, "target_value", UINT32),
                FieldDef(5, "custom_target_value_low", UINT32),
                FieldDef(6, "custom_target_value_high", UINT32),
                FieldDef(7, "intensity", ENUM),
                FieldDef(8, "notes", STRING),
                FieldDef(9, "equipment", ENUM),
            ),
        ),
        MessageDef(
            18,
            "session",
            (
                _TIMESTAMP,
                *_SUMMARY_FIELDS,
                FieldDef(5, "sport", ENUM),
                FieldDef(6, "sub_sport", ENUM),
                FieldDef(11, "total_calories", UINT16),
                FieldDef(14, "avg_speed", UINT16, scale=1000),
                FieldDef(15, "max_speed", UINT16, scale=1000),
                FieldDef(16, "avg_heart_rate", UINT8),
                FieldDef(17, "max_heart_rate", UINT8),
                FieldDef(18, "avg_cadence", UINT8),
                FieldDef(19, "max_cadence", UINT8),
                FieldDef(20, "avg_power", UINT16),
                FieldDef(21, "max_power", UINT16),
                FieldDef(22, "total_ascent", UINT16),
                FieldDef(23, "total_descent", UINT16),
            ),
        ),
        MessageDef(
            19,
            "lap",
            (
                _TIMESTAMP,
                *_SUMMARY_FIELDS,
                FieldDef(11, "total_calories", UINT16),
                FieldDef(13, "avg_speed", UINT16, scale=1000),
                FieldDef(14, "max_speed", UINT16, scale=1000),
                FieldDef(15, "avg_heart_rate", UINT8),
                FieldDef(16, "max_heart_rate", UINT8),
                FieldDef(17, "avg_cadence", UINT8),
                FieldDef(18, "max_cadence", UINT8),
                FieldDef(19, "avg_power", UINT16),
                FieldDef(20, "max_power", UINT16),
                FieldDef(24, "lap_trigger", ENUM),
                FieldDef(25, "sport", ENUM),
            ),
        ),
        MessageDef(
            20,
            "record",
            (
                _TIMESTAMP,
                FieldDef(0, "position_lat", SINT32, units="semicircles"),
                FieldDef(1, "position_long", SINT32, units="semicircles"),
                FieldDef(2, "altitude", UINT16, scale=5, offset=500),
                FieldDef(3, "heart_rate", UINT8),
                FieldDef(4, "cadence", UINT8),
                FieldDef(5, "distance", UINT32, scale=100),
                FieldDef(6, "speed", UINT16, scale=1000),
                FieldDef(7, "power", UINT16),
                FieldDef(13, "temperature", SINT8),
            ),
        ),
        MessageDef(
            21,
            "event",
            (
                _TIMESTAMP,
                FieldDef(0, "event", ENUM),
                FieldDef(1, "event_type", ENUM),
                FieldDef(3, "data", UINT32),
                FieldDef(4, "event_group", UINT8),
            ),
        ),
    )
}

MESSAGES_BY_NAME: Dict[str, MessageDef] = {m.name: m for m in MESSAGES.values()}

# file_id.type values
FILE_TYPE_ACTIVITY = 4
FILE_TYPE_WORKOUT = 5
FILE_TYPE_COURSE = 6

# workout_step.duration_type value for "repeat previous steps"
DURATION_REPEAT_UNTIL_STEPS_COMPLETE = 6

# event.event value for timer events
EVENT_TIMER = 0

# Custom target values above these offsets are absolute values.
POWER_CUSTOM_OFFSET = 1000
HEART_RATE_CUSTOM_OFFSET = 100
