"""
Unit tests for the FIT codec.

Tests cover:
- Encoding then decoding logical messages with scaled values
- Header, signature, truncation and CRC failures
- Big endian definitions and unknown messages
- Invalid sentinels dropped on decode
- Encode errors for unknown messages and out-of-range values
"""

import struct
from datetime import datetime, timezone

import pytest

from backend.adapters.fit import FitDecodeError, FitEncodeError, FitFileCodec
from backend.adapters.fit.codec import crc16
from backend.adapters.fit.profile import FIT_EPOCH_OFFSET, UINT8, UINT16, UINT32

START = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def wrap(body: bytes) -> bytes:
    """Put a 14-byte header and file CRC around raw record bytes."""
    header = struct.pack("<BBHI4s", 14, 0x10, 2132, len(body), b".FIT")
    header += struct.pack("<H", crc16(header))
    content = header + body
    return content + struct.pack("<H", crc16(content))


def fit_time(moment: datetime) -> int:
    return int(moment.timestamp()) - FIT_EPOCH_OFFSET


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def codec() -> FitFileCodec:
    return FitFileCodec()


# =============================================================================
# Encode / decode
# =============================================================================


@pytest.mark.unit
class TestEncodeDecode:
    """Tests for encoding and decoding logical messages."""

    def test_workout_messages(self, codec):
        """Workout steps keep their values and order."""
        data = codec.encode(
            [
                ("file_id", {"type": 5, "manufacturer": 1, "time_created": START}),
                ("workout", {"wkt_name": "Tempo", "sport": 1, "num_valid_steps": 2}),
                ("workout_step", {"message_index": 0, "duration_type": 0, "duration_value": 600000}),
                ("workout_step", {"message_index": 1, "duration_type": 1, "duration_value": 100000}),
            ]
        )
        messages = codec.decode(data)
        assert messages["file_id"][0]["time_created"] == START
        assert messages["workout"][0]["wkt_name"] == "Tempo"
        assert [s["message_index"] for s in messages["workout_step"]] == [0, 1]
        assert messages["workout_step"][0]["duration_value"] == 600000

    def test_scaled_fields(self, codec):
        """Scale and offset are applied both ways."""
        data = codec.encode(
            [
                (
                    "record",
                    {"timestamp": START, "altitude": 35.2, "speed": 3.456, "distance": 1234.56},
                )
            ]
        )
        record = codec.decode(data)["record"][0]
        assert record["altitude"] == pytest.approx(35.2)
        assert record["speed"] == pytest.approx(3.456)
        assert record["distance"] == pytest.approx(1234.56)

    def test_positions_in_degrees(self, codec):
        """Semicircles are converted to degrees."""
        data = codec.encode([("record", {"timestamp": START, "position_lat": 51.5, "position_long": -0.12})])
        record = codec.decode(data)["record"][0]
        assert record["position_lat"] == pytest.approx(51.5, abs=1e-6)
        assert record["position_long"] == pytest.approx(-0.12, abs=1e-6)

    def test_none_values_omitted(self, codec):
        """Fields set to None are not written."""
        data = codec.encode([("file_id", {"type": 4, "manufacturer": None})])
        assert codec.decode(data)["file_id"][0] == {"type": 4}

    def test_naive_datetime_treated_as_utc(self, codec):
        data = codec.encode([("file_id", {"time_created": START.replace(tzinfo=None)})])
        assert codec.decode(data)["file_id"][0]["time_created"] == START

    def test_many_layouts_reuse_local_numbers(self, codec):
        """More layouts than local message slots still decode."""
        # Step names of different lengths give every message its own layout.
        messages = [
            ("workout_step", {"message_index": i, "wkt_step_name": "x" * (i + 1)})
            for i in range(20)
        ]
        decoded = codec.decode(codec.encode(messages))["workout_step"]
        assert [step["message_index"] for step in decoded] == list(range(20))
        assert decoded[19]["wkt_step_name"] == "x" * 20


@pytest.mark.unit
class TestDecodeErrors:
    """Tests for structurally broken files."""

    def test_too_short(self, codec):
        with pytest.raises(FitDecodeError):
            codec.decode(b"\x0e\x10")

    def test_missing_signature(self, codec):
        data = bytearray(codec.encode([("file_id", {"type": 4})]))
        data[8:12] = b"XFIT"
        with pytest.raises(FitDecodeError):
            codec.decode(bytes(data))

    def test_truncated(self, codec):
        data = codec.encode([("file_id", {"type": 4})])
        with pytest.raises(FitDecodeError):
            codec.decode(data[:-4])

    def test_crc_mismatch(self, codec):
        data = bytearray(codec.encode([("file_id", {"type": 4, "manufacturer": 1})]))
        data[-3] ^= 0xFF
        with pytest.raises(FitDecodeError):
            codec.decode(bytes(data))

    def test_decode_error_is_value_error(self):
        """Readers catch codec failures as ValueError."""
        assert issubclass(FitDecodeError, ValueError)


@pytest.mark.unit
class TestDecodeVariants:
    """Tests for record layouts the encoder never produces."""

    def test_big_endian_definition(self, codec):
        body = struct.pack(">BBBHB", 0x40, 0, 1, 20, 2)
        body += struct.pack("BBB", 253, 4, UINT32) + struct.pack("BBB", 3, 1, UINT8)
        body += struct.pack(">BIB", 0x00, fit_time(START), 142)
        record = codec.decode(wrap(body))["record"][0]
        assert record["timestamp"] == START
        assert record["heart_rate"] == 142

    def test_invalid_sentinels_dropped(self, codec):
        body = struct.pack("<BBBHB", 0x40, 0, 0, 0, 2)
        body += struct.pack("BBB", 1, 2, UINT16) + struct.pack("BBB", 2, 2, UINT16)
        body += struct.pack("<BHH", 0x00, 1, 0xFFFF)
        assert codec.decode(wrap(body))["file_id"][0] == {"manufacturer": 1}

    def test_unknown_messages_skipped(self, codec):
        body = struct.pack("<BBBHB", 0x40, 0, 0, 9999, 1)
        body += struct.pack("BBB", 0, 1, UINT8)
        body += struct.pack("<BB", 0x00, 7)
        assert codec.decode(wrap(body)) == {}

    def test_enum_fields_stay_numeric(self, codec):
        """Enum and sub-field values come back as raw numbers, not names."""
        data = codec.encode(
            [
                (
                    "workout_step",
                    {"message_index": 0, "duration_type": 0, "duration_value": 300000, "target_type": 1},
                )
            ]
        )
        step = codec.decode(data)["workout_step"][0]
        assert step == {
            "message_index": 0,
            "duration_type": 0,
            "duration_value": 300000,
            "target_type": 1,
        }


@pytest.mark.unit
class TestEncodeErrors:
    """Tests for values FIT cannot hold."""

    def test_unknown_message(self, codec):
        with pytest.raises(FitEncodeError, match="Unknown FIT message"):
            codec.encode([("lap_swim", {})])

    def test_out_of_range(self, codec):
        with pytest.raises(FitEncodeError, match="out of range"):
            codec.encode([("file_id", {"product": 70000})])

    def test_timestamp_requires_datetime(self, codec):
        with pytest.raises(FitEncodeError, match="datetime"):
            codec.encode([("file_id", {"time_created": "2024-01-15"})])

    def test_non_finite_value(self, codec):
        with pytest.raises(FitEncodeError, match="out of range"):
            codec.encode([("record", {"timestamp": START, "speed": float("inf")})])
