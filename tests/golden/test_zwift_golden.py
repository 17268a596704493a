"""
Golden tests for the Zwift adapter.

Covers:
- Warmup and Cooldown ramps, including a descending cooldown
- IntervalsT with cadence and a text event
- FreeRide segments
- Workout header fields (author, description, tags)
"""

import pytest

from backend.adapters.zwift import ZwiftReader, ZwiftWriter
from tests.golden import assert_golden, canonical_snapshot, load_fixture

FIXTURE = "zwift/sweet_spot.zwo"


@pytest.fixture
def record():
    return ZwiftReader().read(load_fixture(FIXTURE))


class TestZwiftGolden:
    """.zwo text <-> canonical record."""

    @pytest.mark.golden
    @pytest.mark.unit
    def test_sweet_spot_canonical(self, record):
        assert_golden(canonical_snapshot(record), "zwift/sweet_spot.canonical.json")

    @pytest.mark.golden
    @pytest.mark.unit
    def test_rewrite_reproduces_file(self, record):
        assert_golden(ZwiftWriter().write(record), FIXTURE)
