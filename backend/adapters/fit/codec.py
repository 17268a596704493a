"""
FIT codec.

Decoding goes through ``fitparse``; encoding packs the FIT container
(header, definition and data records, CRC-16) with ``struct`` for the
messages declared in ``profile``. Both directions deal in logical messages
only: ``{"workout_step": [{"message_index": 0, ...}, ...], ...}`` with
physical (scaled) values. The workout/activity semantics live in the reader
and writer.

Decoding keeps the raw values ``fitparse`` reports for each field number and
scales them with the local profile, so enum fields stay integers. Messages
and fields unknown to the profile, developer fields and invalid sentinels are
dropped.

Encoding always writes little endian with a 14 byte header.
"""

import io
import math
import struct
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fitparse import FitFile
from fitparse.records import DevFieldDefinition
from fitparse.utils import FitParseError

from backend.adapters.fit.profile import (
    BASE_TYPES,
    FIT_EPOCH_OFFSET,
    MESSAGES,
    MESSAGES_BY_NAME,
    SEMICIRCLES_PER_DEGREE,
    STRING,
    BaseType,
    FieldDef,
    MessageDef,
)

PROTOCOL_VERSION = 0x10
PROFILE_VERSION = 2132
HEADER_SIZE = 14
MAX_LOCAL_MESSAGES = 16
TIMESTAMP_FIELD = 253

Messages = Dict[str, List[Dict[str, Any]]]


class FitDecodeError(ValueError):
    """Raised for structurally broken FIT data."""


class FitEncodeError(ValueError):
    """
    Raised when a message cannot be represented in FIT.

    ``position`` is the index of the offending message in the sequence passed
    to ``encode``.
    """

    position: Optional[int] = None


def crc16(data):
    crc_table = [
        0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
        0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400
    ]
    crc = 0
    for byte in data:
        tmp = crc_table[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ crc_table[byte & 0xF]
        tmp = crc_table[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ crc_table[(byte >> 4) & 0xF]
    return crc


def _to_physical(field: FieldDef, raw: Any) -> Any:
    if field.units == "date_time":
        return datetime.fromtimestamp(raw + FIT_EPOCH_OFFSET, tz=timezone.utc)
    if field.units == "semicircles":
        return raw / SEMICIRCLES_PER_DEGREE
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if field.scale == 1 and field.offset == 0:
        return raw
    return raw / field.scale - field.offset


def _to_raw(field: FieldDef, value: Any) -> int:
    if field.units == "date_time":
        if not isinstance(value, datetime):
            raise FitEncodeError(f"{field.name} must be a datetime")
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp()) - FIT_EPOCH_OFFSET
    if field.units == "semicircles":
        scaled = value * SEMICIRCLES_PER_DEGREE
    else:
        scaled = (value + field.offset) * field.scale
    if not math.isfinite(scaled):
        raise FitEncodeError(f"{field.name}={value!r} is out of range")
    return int(round(scaled))


def _raw_fields(fit_message) -> Dict[int, Any]:
    """Raw values by field number, as defined in the file."""
    raw: Dict[int, Any] = {}
    timestamp = None
    for field_data in fit_message.fields:
        field_def = field_data.field_def
        if field_def is None:
            # Compressed timestamp headers add a timestamp with no definition;
            # component expansions are skipped.
            if field_data.def_num == TIMESTAMP_FIELD:
                timestamp = field_data.raw_value
            continue
        if isinstance(field_def, DevFieldDefinition) or field_data.raw_value is None:
            continue
        raw.setdefault(field_def.def_num, field_data.raw_value)
    if timestamp is not None:
        raw.setdefault(TIMESTAMP_FIELD, timestamp)
    return raw


def _physical_fields(message: MessageDef, raw: Dict[int, Any]) -> Dict[str, Any]:
    values = {}
    for number, value in raw.items():
        field = message.field_by_number(number)
        if field is not None:
            values[field.name] = _to_physical(field, value)
    return values


class FitFileCodec:
    """FIT codec: ``fitparse`` for decoding, ``struct`` for encoding."""

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, data: bytes) -> Messages:
        messages: Messages = defaultdict(list)
        try:
            fit_file = FitFile(io.BytesIO(data), check_crc=True)
            for fit_message in fit_file.get_messages():
                message = MESSAGES.get(fit_message.mesg_num)
                if message is None:
                    continue
                messages[message.name].append(_physical_fields(message, _raw_fields(fit_message)))
        except FitParseError as exc:
            raise FitDecodeError(str(exc) or "Invalid FIT file") from exc
        return dict(messages)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, messages: Sequence[Tuple[str, Dict[str, Any]]]) -> bytes:
        body = bytearray()
        layouts: Dict[Tuple, int] = {}
        next_local = 0
        for position, (name, values) in enumerate(messages):
            message = MESSAGES_BY_NAME.get(name)
            fields = []
            payload = bytearray()
            try:
                if message is None:
                    raise FitEncodeError(f"Unknown FIT message: {name}")
                for field in message.fields:
                    value = values.get(field.name)
                    if value is None:
                        continue
                    encoded = self._encode_value(field, value)
                    fields.append((field.number, len(encoded), field.base_type))
                    payload += encoded
            except FitEncodeError as exc:
                exc.position = position
                raise
            layout = (message.number, tuple(fields))
            local = layouts.get(layout)
            if local is None:
                local = next_local % MAX_LOCAL_MESSAGES
                next_local += 1
                for stale in [k for k, v in layouts.items() if v == local]:
                    del layouts[stale]
                layouts[layout] = local
                body += struct.pack("<BBBHB", 0x40 | local, 0, 0, message.number, len(fields))
                for number, size, base in fields:
                    body += struct.pack("<BBB", number, size, base)
            body += struct.pack("<B", local)
            body += payload

        header = struct.pack(
            "<BBHI4s", HEADER_SIZE, PROTOCOL_VERSION, PROFILE_VERSION, len(body), b".FIT"
        )
        header += struct.pack("<H", crc16(header))
        content = header + bytes(body)
        return content + struct.pack("<H", crc16(content))

    @staticmethod
    def _encode_value(field: FieldDef, value: Any) -> bytes:
        base_type = BASE_TYPES[field.base_type]
        if base_type.code == STRING:
            encoded = str(value).encode("utf-8")[:254]
            return encoded + b"\x00"
        raw = _to_raw(field, value)
        if not _fits(base_type, raw):
            raise FitEncodeError(f"{field.name}={value!r} is out of range")
        return struct.pack("<" + base_type.fmt, raw)


def _fits(base_type: BaseType, raw: int) -> bool:
    bits = base_type.size * 8
    if base_type.fmt.islower():
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    return low <= raw <= high and raw != base_type.invalid
