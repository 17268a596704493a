"""
Field-by-field comparison of two canonical records.

Used by round-trip validation: the first and last canonical record of a
conversion cycle are walked in parallel (sessions, laps, records, workout
steps) and every deviation beyond tolerance is reported with the path of the
compared value. Values present on only one side are not compared; structural
differences (counts, step kinds, duration/target kinds, units) are reported
as exact-match violations.
"""

from datetime import datetime
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from domain.exceptions import ToleranceViolation
from domain.models import CanonicalRecord, RepetitionBlock, Workout, WorkoutStep
from domain.validation.schema_validator import extract_workout
from domain.validation.tolerance import ToleranceChecker

Check = Callable[[float, float, str], Optional[ToleranceViolation]]

_DURATION_FIELDS = ("seconds", "meters", "calories", "bpm", "watts", "repeatFrom")


class RecordComparer:
    """Collects tolerance violations between an expected and an actual record."""

    def __init__(self, checker: ToleranceChecker) -> None:
        self._checker = checker

    def compare(
        self, expected: CanonicalRecord, actual: CanonicalRecord
    ) -> List[ToleranceViolation]:
        violations: List[ToleranceViolation] = []
        violations += self._compare_series(
            "sessions", expected.sessions, actual.sessions, self._session_checks()
        )
        violations += self._compare_series(
            "laps", expected.laps, actual.laps, self._lap_checks()
        )
        violations += self._compare_series(
            "records", expected.records, actual.records, self._record_checks()
        )
        expected_workout = extract_workout(expected)
        actual_workout = extract_workout(actual)
        if expected_workout is not None and actual_workout is not None:
            violations += self.compare_workouts(expected_workout, actual_workout)
        return violations

    # ------------------------------------------------------------------
    # Activity data
    # ------------------------------------------------------------------

    def _session_checks(self):
        c = self._checker
        return [
            ("startTime", c.check_time),
            ("totalElapsedTime", c.check_time),
            ("totalTimerTime", c.check_time),
            ("totalDistance", c.check_distance),
            ("avgHeartRate", c.check_heart_rate),
            ("maxHeartRate", c.check_heart_rate),
            ("avgCadence", c.check_cadence),
            ("maxCadence", c.check_cadence),
            ("avgPower", c.check_power),
            ("maxPower", c.check_power),
            ("avgSpeed", c.check_pace),
            ("maxSpeed", c.check_pace),
        ]

    def _lap_checks(self):
        return self._session_checks()

    def _record_checks(self):
        c = self._checker
        return [
            ("timestamp", c.check_time),
            ("heartRate", c.check_heart_rate),
            ("cadence", c.check_cadence),
            ("power", c.check_power),
            ("speed", c.check_pace),
            ("distance", c.check_distance),
            ("altitude", c.check_distance),
        ]

    def _compare_series(
        self,
        name: str,
        expected: Optional[Sequence[BaseModel]],
        actual: Optional[Sequence[BaseModel]],
        checks,
    ) -> List[ToleranceViolation]:
        expected = expected or []
        actual = actual or []
        violations: List[ToleranceViolation] = []
        count = self._checker.check_exact(len(expected), len(actual), f"{name}.length")
        if count:
            violations.append(count)
        for index, (left, right) in enumerate(zip(expected, actual)):
            for attr, check in checks:
                violation = _compare_attr(
                    check, getattr(left, attr), getattr(right, attr), f"{name}[{index}].{attr}"
                )
                if violation:
                    violations.append(violation)
        return violations

    # ------------------------------------------------------------------
    # Workout steps
    # ------------------------------------------------------------------

    def compare_workouts(
        self, expected: Workout, actual: Workout
    ) -> List[ToleranceViolation]:
        violations: List[ToleranceViolation] = []
        exact = self._checker.check_exact
        count = exact(len(expected.steps), len(actual.steps), "workout.steps.length")
        if count:
            violations.append(count)
        for index, (left, right) in enumerate(zip(expected.steps, actual.steps)):
            path = f"workout.steps[{index}]"
            left_is_block = isinstance(left, RepetitionBlock)
            right_is_block = isinstance(right, RepetitionBlock)
            if left_is_block != right_is_block:
                violations.append(exact(int(left_is_block), int(right_is_block), f"{path}.kind"))
                continue
            if left_is_block:
                violations += self._compare_blocks(left, right, path)
            else:
                violations += self.compare_steps(left, right, path)
        return violations

    def _compare_blocks(
        self, expected: RepetitionBlock, actual: RepetitionBlock, path: str
    ) -> List[ToleranceViolation]:
        exact = self._checker.check_exact
        violations = [
            v
            for v in (
                exact(expected.repeatCount, actual.repeatCount, f"{path}.repeatCount"),
                exact(len(expected.steps), len(actual.steps), f"{path}.steps.length"),
            )
            if v
        ]
        for index, (left, right) in enumerate(zip(expected.steps, actual.steps)):
            violations += self.compare_steps(left, right, f"{path}.steps[{index}]")
        return violations

    def compare_steps(
        self, expected: WorkoutStep, actual: WorkoutStep, path: str
    ) -> List[ToleranceViolation]:
        violations: List[ToleranceViolation] = []
        violations += self._compare_durations(expected, actual, f"{path}.duration")
        violations += self._compare_targets(expected, actual, f"{path}.target")
        return violations

    def _compare_durations(
        self, expected: WorkoutStep, actual: WorkoutStep, path: str
    ) -> List[ToleranceViolation]:
        c = self._checker
        if expected.duration.type != actual.duration.type:
            return [c.check_exact(0, 1, f"{path}.type")]
        checks = {
            "seconds": c.check_time,
            "meters": c.check_distance,
            "calories": c.check_exact,
            "bpm": c.check_heart_rate,
            "watts": c.check_power,
            "repeatFrom": c.check_exact,
        }
        violations = []
        for attr in _DURATION_FIELDS:
            violation = _compare_attr(
                checks[attr],
                getattr(expected.duration, attr, None),
                getattr(actual.duration, attr, None),
                f"{path}.{attr}",
            )
            if violation:
                violations.append(violation)
        return violations

    def _value_check(self, step: WorkoutStep) -> Check:
        c = self._checker
        target = step.target
        if target.type == "power":
            unit = target.value.unit
            if unit == "percent_ftp" or (unit == "range" and step.power_range_unit == "percent_ftp"):
                return c.check_ftp_percent
            return c.check_power
        return {
            "heart_rate": c.check_heart_rate,
            "cadence": c.check_cadence,
            "pace": c.check_pace,
        }.get(target.type, c.check_exact)

    def _compare_targets(
        self, expected: WorkoutStep, actual: WorkoutStep, path: str
    ) -> List[ToleranceViolation]:
        c = self._checker
        left, right = expected.target, actual.target
        if left.type != right.type:
            return [c.check_exact(0, 1, f"{path}.type")]
        if left.type == "open":
            return []
        if left.value.unit != right.value.unit:
            return [c.check_exact(0, 1, f"{path}.value.unit")]
        unit = left.value.unit
        check = c.check_exact if unit == "zone" else self._value_check(expected)
        if unit == "range":
            pairs = [("min", left.value.min, right.value.min), ("max", left.value.max, right.value.max)]
        else:
            pairs = [("value", left.value.value, right.value.value)]
        return [
            v
            for v in (check(e, a, f"{path}.value.{name}") for name, e, a in pairs)
            if v
        ]


def _compare_attr(
    check: Check, expected, actual, field: str
) -> Optional[ToleranceViolation]:
    if expected is None or actual is None:
        return None
    if isinstance(expected, datetime) and isinstance(actual, datetime):
        return check(expected.timestamp(), actual.timestamp(), field)
    return check(expected, actual, field)
