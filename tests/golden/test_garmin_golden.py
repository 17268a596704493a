"""
Golden tests for the Garmin Connect (GCN) adapter.

Covers:
- Swim workout with pool length, stroke and equipment
- RepeatGroupDTO with interval and rest children
- Lap button cooldown with a heart rate range
- Workout ids kept in the garmin extension
"""

import pytest

from backend.adapters.garmin import GarminReader, GarminWriter
from tests.golden import assert_golden, canonical_snapshot, load_fixture


class TestGarminGolden:
    """GCN JSON -> canonical record."""

    @pytest.mark.golden
    @pytest.mark.unit
    def test_pool_endurance_canonical(self, fixtures_dir):
        text = (fixtures_dir / "garmin" / "pool_endurance.json").read_text(encoding="utf-8")
        record = GarminReader().read(text)
        assert_golden(canonical_snapshot(record), "garmin/pool_endurance.canonical.json")

    @pytest.mark.golden
    @pytest.mark.unit
    def test_rewrite_keeps_steps(self, fixtures_dir):
        """Written steps read back to the same canonical workout."""
        text = (fixtures_dir / "garmin" / "pool_endurance.json").read_text(encoding="utf-8")
        record = GarminReader().read(text)
        rewritten = GarminReader().read(GarminWriter().write(record))
        expected = load_fixture("garmin/pool_endurance.canonical.json")
        snapshot = canonical_snapshot(rewritten)
        assert snapshot["extensions"]["structured_workout"] == expected["extensions"]["structured_workout"]
