"""
Unit tests for the vendor mapping dictionaries.

Tests cover:
- LookupTable forward/backward lookups and defaults
- Case-insensitive tables
- Each vendor table loads and maps its documented values
- Manufacturer name resolution with fuzzy matching
"""

import pytest

from backend.adapters.dictionaries import LookupTable, load_dictionary
from backend.adapters.fit import mappings as fit_mappings
from backend.adapters.garmin import mappings as garmin_mappings
from backend.adapters.tcx import mappings as tcx_mappings
from backend.adapters.zwift import mappings as zwift_mappings


@pytest.mark.unit
class TestLookupTable:
    """Tests for LookupTable."""

    def test_forward_and_inverted_backward(self):
        """Without an explicit backward map the forward map is inverted."""
        table = LookupTable({0: "active", 1: "rest"}, default="active", backward_default=0)
        assert table.to_canonical(1) == "rest"
        assert table.from_canonical("rest") == 1

    def test_first_key_wins_on_inversion(self):
        """Duplicate canonical values invert to the first vendor key."""
        table = LookupTable({"rest": "rest", "resting": "rest"})
        assert table.from_canonical("rest") == "rest"

    def test_defaults_for_unknown_and_none(self):
        """Unknown and None keys map to the defaults."""
        table = LookupTable({0: "a"}, default="z", backward_default=9)
        assert table.to_canonical(5) == "z"
        assert table.to_canonical(None) == "z"
        assert table.from_canonical("missing") == 9
        assert table.from_canonical(None) == 9

    def test_case_insensitive(self):
        """Case-insensitive tables fold vendor keys."""
        table = LookupTable({"Warmup": "warmup"}, case_insensitive=True)
        assert table.to_canonical("WARMUP") == "warmup"
        assert table.knows("warmup")

    def test_dictionary_cached(self):
        """Dictionaries are loaded once."""
        assert load_dictionary("fit") is load_dictionary("fit")


@pytest.mark.unit
class TestFitTables:
    """Tests for the FIT enumeration tables."""

    @pytest.mark.parametrize(
        "value, stroke",
        [(0, "freestyle"), (1, "backstroke"), (2, "breaststroke"), (3, "butterfly"), (4, "drill"), (5, "mixed"), (6, "im")],
    )
    def test_stroke_table(self, value, stroke):
        """The binary stroke table matches the FIT profile."""
        assert fit_mappings.STROKE.to_canonical(value) == stroke
        assert fit_mappings.STROKE.from_canonical(stroke) == value

    def test_duration_defaults_to_open(self):
        """Unknown duration types become open."""
        assert fit_mappings.DURATION_TYPE.to_canonical(99) == "open"

    def test_intensity(self):
        """FIT intensity 2 is warmup."""
        assert fit_mappings.INTENSITY.to_canonical(2) == "warmup"
        assert fit_mappings.INTENSITY.from_canonical("cooldown") == 3


@pytest.mark.unit
class TestManufacturer:
    """Tests for manufacturer name resolution."""

    def test_exact_name(self):
        assert fit_mappings.manufacturer_id("garmin") == 1

    def test_numeric_string(self):
        assert fit_mappings.manufacturer_id("260") == 260

    def test_vendor_spelling(self):
        """Close spellings resolve through fuzzy matching."""
        assert fit_mappings.manufacturer_id("Wahoo Fitness") == 32

    def test_unknown_name(self):
        assert fit_mappings.manufacturer_id("Acme Sprockets") is None

    def test_unknown_id_kept_as_number(self):
        """Unknown ids keep their number as the name."""
        assert fit_mappings.manufacturer_name(9999) == "9999"
        assert fit_mappings.manufacturer_name(1) == "garmin"


@pytest.mark.unit
class TestXmlTables:
    """Tests for the TCX and Zwift tables."""

    def test_tcx_sport(self):
        assert tcx_mappings.SPORT.to_canonical("Biking") == "cycling"
        assert tcx_mappings.SPORT.from_canonical("cycling") == "Biking"
        assert tcx_mappings.SPORT.from_canonical("swimming") == "Other"

    def test_tcx_intensity_case_insensitive(self):
        assert tcx_mappings.INTENSITY.to_canonical("warmup") == "warmup"
        assert tcx_mappings.INTENSITY.to_canonical("Resting") == "rest"

    def test_zwift_fraction_conversion(self):
        assert zwift_mappings.fraction_to_percent(0.75) == 75.0
        assert zwift_mappings.percent_to_fraction(105) == 1.05

    def test_zwift_zone_table(self):
        assert zwift_mappings.POWER_ZONE_PERCENT[4] == 98.0
        assert set(zwift_mappings.POWER_ZONE_PERCENT) == set(range(1, 8))


@pytest.mark.unit
class TestGarminTables:
    """Tests for the Garmin Connect tables."""

    def test_condition_mapping(self):
        assert garmin_mappings.CONDITION.to_canonical("heart.rate") == "heart_rate_less_than"
        assert garmin_mappings.CONDITION.to_canonical("mystery") == "open"

    def test_speed_zone_is_pace(self):
        assert garmin_mappings.TARGET.to_canonical("speed.zone") == "pace"

    def test_stroke_keys_use_binary_table(self):
        """GCN stroke keys convert to the FIT stroke integers."""
        assert garmin_mappings.stroke_to_binary("fly") == 3
        assert garmin_mappings.stroke_to_binary("individual_medley") == 6
        assert garmin_mappings.stroke_to_binary("any_stroke") is None
        assert garmin_mappings.binary_to_stroke_key(1) == "backstroke"

    def test_objects_carry_ids(self):
        """Writer objects carry id, key and displayOrder."""
        assert garmin_mappings.step_type("warmup") == {
            "stepTypeId": 1,
            "stepTypeKey": "warmup",
            "displayOrder": 1,
        }
        assert garmin_mappings.condition("iterations")["displayable"] is False
