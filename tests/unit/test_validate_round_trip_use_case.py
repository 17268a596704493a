"""
Unit tests for ValidateRoundTripUseCase.

Tests for:
- Lossless reader/writer pairs report no violations
- Drift beyond tolerance is reported, and raised by the assert variants
- Inputs are not mutated
- Pass/fail logging
"""

import copy
import json
import logging

import pytest

from application.use_cases import ValidateRoundTripUseCase
from backend.adapters.fit import FitFileCodec, FitReader, FitWriter
from domain.exceptions import ToleranceExceededError, ValidationError
from domain.validation import DEFAULT_TOLERANCES, ToleranceChecker
from tests.fakes import JsonFormat, make_activity_document


def stretch_first_step(document):
    """Adds ten seconds to the first workout step."""
    step = document["extensions"]["workout"]["steps"][0]
    step["duration"]["seconds"] += 10
    return document


def round_power(document):
    """Rounds the first power target to the nearest ten percent."""
    target = document["extensions"]["workout"]["steps"][0]["target"]
    target["value"]["value"] = round(target["value"]["value"], -1)
    return document


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def lossless() -> JsonFormat:
    return JsonFormat()


@pytest.fixture
def drifting() -> JsonFormat:
    return JsonFormat(drift=stretch_first_step)


def use_case_for(json_format: JsonFormat, **kwargs) -> ValidateRoundTripUseCase:
    return ValidateRoundTripUseCase(reader=json_format, writer=json_format, **kwargs)


# =============================================================================
# from_canonical
# =============================================================================


@pytest.mark.unit
class TestFromCanonical:
    """Tests for canonical -> format -> canonical cycles."""

    def test_lossless_pair(self, lossless, interval_document):
        assert use_case_for(lossless).from_canonical(interval_document) == []
        assert lossless.writes == 2
        assert lossless.reads == 2

    def test_drift_reported(self, drifting, interval_record):
        violations = use_case_for(drifting).from_canonical(interval_record)
        assert [v.field for v in violations] == ["workout.steps[0].duration.seconds"]
        assert violations[0].expected == 600
        assert violations[0].actual == 620
        assert violations[0].deviation == 20

    def test_drift_within_custom_tolerance(self, drifting, interval_record):
        config = DEFAULT_TOLERANCES.model_copy(update={"time_tolerance": 30})
        use_case = use_case_for(drifting, checker=ToleranceChecker(config))
        assert use_case.from_canonical(interval_record) == []

    def test_invalid_input_rejected(self, lossless):
        with pytest.raises(ValidationError):
            use_case_for(lossless).from_canonical({"version": "one"})
        assert lossless.writes == 0

    def test_input_not_mutated(self, drifting, interval_document):
        before = copy.deepcopy(interval_document)
        use_case_for(drifting).from_canonical(interval_document)
        assert interval_document == before

    def test_assert_raises(self, drifting, interval_record):
        with pytest.raises(ToleranceExceededError) as exc_info:
            use_case_for(drifting).assert_from_canonical(interval_record)
        assert "1 violation(s)" in str(exc_info.value)
        assert exc_info.value.violations[0].field == "workout.steps[0].duration.seconds"

    def test_assert_passes(self, lossless, interval_record):
        use_case_for(lossless).assert_from_canonical(interval_record)

    def test_activity_through_fit(self):
        codec = FitFileCodec()
        use_case = ValidateRoundTripUseCase(reader=FitReader(codec), writer=FitWriter(codec))
        assert use_case.from_canonical(make_activity_document()) == []


# =============================================================================
# from_format
# =============================================================================


@pytest.mark.unit
class TestFromFormat:
    """Tests for format -> canonical -> format -> canonical cycles."""

    def test_lossless_payload(self, lossless, interval_record):
        payload = json.dumps(interval_record.to_document())
        assert use_case_for(lossless).from_format(payload) == []
        assert lossless.reads == 2

    def test_idempotent_drift_passes(self, interval_record):
        """Drift that only applies once does not show up between the two reads."""
        rounding = JsonFormat(drift=round_power)
        payload = rounding.write(interval_record)
        assert use_case_for(rounding).from_format(payload) == []

    def test_assert_raises(self, drifting, interval_record):
        payload = json.dumps(interval_record.to_document())
        with pytest.raises(ToleranceExceededError):
            use_case_for(drifting).assert_from_format(payload)


# =============================================================================
# Logging
# =============================================================================


@pytest.mark.unit
class TestLogging:
    """Tests for round-trip log records."""

    def test_failure_logged(self, drifting, interval_record, test_logger, caplog):
        with caplog.at_level(logging.WARNING, logger=test_logger.name):
            use_case_for(drifting, logger=test_logger).from_canonical(interval_record)
        record = caplog.records[-1]
        assert record.getMessage() == "Round-trip validation failed"
        assert record.violationCount == 1
        assert record.origin == "canonical"

    def test_success_logged(self, lossless, interval_record, test_logger, caplog):
        with caplog.at_level(logging.INFO, logger=test_logger.name):
            use_case_for(lossless, logger=test_logger).from_canonical(interval_record)
        assert caplog.records[-1].getMessage() == "Round-trip validation passed"
