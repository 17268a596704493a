"""
Fakes and builders for testing.

This package provides in-memory implementations of the reader, writer and
FIT codec ports plus canonical document builders. No files or vendor data
required.

Usage:
    from tests.fakes import FakeReader, FakeWriter, make_interval_document

    reader = FakeReader(record)
    writer = FakeWriter(output="{}")
    document = make_interval_document(sport="cycling")
"""

from tests.fakes.format_adapters import FakeFitCodec, FakeReader, FakeWriter, JsonFormat
from tests.fakes.records import (
    CREATED,
    cadence_rpm,
    distance_duration,
    heart_rate_bpm,
    make_activity_document,
    make_block,
    make_interval_document,
    make_minimal_document,
    make_step,
    make_workout_document,
    open_target,
    pace_mps,
    power_percent,
    power_watts,
    time_duration,
    value_range,
    zone,
)

__all__ = [
    # Adapters
    "FakeReader",
    "FakeWriter",
    "FakeFitCodec",
    "JsonFormat",
    # Builders
    "CREATED",
    "make_step",
    "make_block",
    "make_workout_document",
    "make_minimal_document",
    "make_interval_document",
    "make_activity_document",
    "time_duration",
    "distance_duration",
    "open_target",
    "power_percent",
    "power_watts",
    "heart_rate_bpm",
    "pace_mps",
    "cadence_rpm",
    "zone",
    "value_range",
]
