"""
Unit tests for the repetition flattening engine.

Tests cover:
- Leaves numbered 0..n-1 across groups and segments
- Top-level groups become blocks with their iteration count
- Nested groups collapse into the enclosing block with a warning
- Vendor ordering of canonical steps (number_canonical_steps)
- reindex_steps
"""

import logging

import pytest

from domain.flattening import (
    OrderedGroup,
    OrderedStep,
    RepeatGroup,
    StepIndexCounter,
    StepLeaf,
    flatten_step_tree,
    number_canonical_steps,
    reindex_steps,
)
from domain.models import RepetitionBlock, Workout
from tests.fakes import make_block, make_step


def map_leaf(payload, index):
    return {"name": payload, "stepIndex": index}


def indexes(flattened):
    result = []
    for entry in flattened:
        if "repeatCount" in entry:
            result.extend(step["stepIndex"] for step in entry["steps"])
        else:
            result.append(entry["stepIndex"])
    return result


# =============================================================================
# flatten_step_tree
# =============================================================================


@pytest.mark.unit
class TestFlattenStepTree:
    """Tests for flatten_step_tree()."""

    def test_leaves_only(self):
        """Plain leaves are numbered in order."""
        flattened = flatten_step_tree([StepLeaf("a"), StepLeaf("b")], map_leaf)
        assert flattened == [{"name": "a", "stepIndex": 0}, {"name": "b", "stepIndex": 1}]

    def test_group_becomes_block(self):
        """A top-level group keeps its iteration count."""
        flattened = flatten_step_tree(
            [RepeatGroup(iterations=3, children=[StepLeaf("on"), StepLeaf("off")])], map_leaf
        )
        assert flattened == [
            {
                "repeatCount": 3,
                "steps": [{"name": "on", "stepIndex": 0}, {"name": "off", "stepIndex": 1}],
            }
        ]

    def test_step_after_group_continues_counter(self):
        """The step after a 2-step group gets stepIndex 2."""
        flattened = flatten_step_tree(
            [
                RepeatGroup(iterations=3, children=[StepLeaf("on"), StepLeaf("off")]),
                StepLeaf("cooldown"),
            ],
            map_leaf,
        )
        assert flattened[1] == {"name": "cooldown", "stepIndex": 2}

    def test_indexes_strictly_increasing(self):
        """stepIndex runs 0..n-1 over a mixed tree."""
        tree = [
            StepLeaf("warmup"),
            RepeatGroup(iterations=2, children=[StepLeaf("a"), StepLeaf("b"), StepLeaf("c")]),
            StepLeaf("middle"),
            RepeatGroup(iterations=4, children=[StepLeaf("d")]),
            StepLeaf("cooldown"),
        ]
        assert indexes(flatten_step_tree(tree, map_leaf)) == list(range(7))

    def test_group_id_kept(self):
        """A group id is carried onto the block."""
        flattened = flatten_step_tree(
            [RepeatGroup(iterations=2, children=[StepLeaf("a")], id="main-set")], map_leaf
        )
        assert flattened[0]["id"] == "main-set"

    def test_zero_iterations_clamped(self):
        """Groups without a usable count repeat once."""
        flattened = flatten_step_tree([RepeatGroup(iterations=0, children=[StepLeaf("a")])], map_leaf)
        assert flattened[0]["repeatCount"] == 1

    def test_shared_counter_across_segments(self):
        """A shared counter keeps numbering across separate calls."""
        counter = StepIndexCounter()
        first = flatten_step_tree([StepLeaf("a"), StepLeaf("b")], map_leaf, counter=counter)
        second = flatten_step_tree([StepLeaf("c")], map_leaf, counter=counter)
        assert indexes(first + second) == [0, 1, 2]
        assert counter.value == 3

    def test_output_validates_as_workout(self):
        """Flattened documents form a valid canonical workout."""
        tree = [
            StepLeaf(300),
            RepeatGroup(iterations=5, children=[StepLeaf(60), StepLeaf(30)]),
        ]
        steps = flatten_step_tree(
            tree,
            lambda seconds, index: make_step(index, {"type": "time", "seconds": seconds}),
        )
        workout = Workout.model_validate({"sport": "cycling", "steps": steps})
        assert isinstance(workout.steps[1], RepetitionBlock)
        assert workout.steps[1].repeatCount == 5


@pytest.mark.unit
class TestNestedGroups:
    """Tests for nested repeat group collapse."""

    def nested_tree(self):
        return [
            RepeatGroup(
                iterations=3,
                children=[
                    StepLeaf("a"),
                    RepeatGroup(iterations=4, children=[StepLeaf("b"), StepLeaf("c")]),
                    StepLeaf("d"),
                ],
            ),
            StepLeaf("e"),
        ]

    def test_nested_group_inlined(self):
        """Inner children are inlined into the outer block."""
        flattened = flatten_step_tree(self.nested_tree(), map_leaf)
        block = flattened[0]
        assert block["repeatCount"] == 3
        assert [step["name"] for step in block["steps"]] == ["a", "b", "c", "d"]
        assert flattened[1] == {"name": "e", "stepIndex": 4}

    def test_nested_group_count_discarded(self):
        """Only the outer iteration count survives; step count is kept."""
        flattened = flatten_step_tree(self.nested_tree(), map_leaf)
        assert len(flattened) == 2
        assert "repeatCount" not in flattened[0]["steps"][1]
        assert indexes(flattened) == [0, 1, 2, 3, 4]

    def test_nested_group_logs_warning(self, caplog):
        """Collapsing a nested group logs a warning with its iteration count."""
        with caplog.at_level(logging.WARNING, logger="domain.flattening"):
            flatten_step_tree(self.nested_tree(), map_leaf)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].getMessage() == "Nested repeat groups are flattened"
        assert warnings[0].iterations == 4

    def test_warning_uses_injected_logger(self, caplog, test_logger):
        """An injected logger receives the warning."""
        with caplog.at_level(logging.WARNING, logger=test_logger.name):
            flatten_step_tree(self.nested_tree(), map_leaf, log=test_logger)
        assert [r.name for r in caplog.records] == [test_logger.name]

    def test_deep_nesting_inlined(self, caplog):
        """Every nested level is inlined, one warning per nested group."""
        tree = [
            RepeatGroup(
                iterations=2,
                children=[
                    RepeatGroup(
                        iterations=3,
                        children=[RepeatGroup(iterations=4, children=[StepLeaf("x")]), StepLeaf("y")],
                    )
                ],
            )
        ]
        with caplog.at_level(logging.WARNING, logger="domain.flattening"):
            flattened = flatten_step_tree(tree, map_leaf)
        assert [step["name"] for step in flattened[0]["steps"]] == ["x", "y"]
        assert len(caplog.records) == 2


# =============================================================================
# number_canonical_steps / reindex_steps
# =============================================================================


@pytest.mark.unit
class TestNumberCanonicalSteps:
    """Tests for number_canonical_steps()."""

    def test_block_takes_its_own_order(self, interval_record):
        """A block takes the next order and its children follow it."""
        ordered = number_canonical_steps(interval_record.extensions.workout.steps)
        assert isinstance(ordered[0], OrderedStep) and ordered[0].order == 1
        group = ordered[1]
        assert isinstance(group, OrderedGroup)
        assert group.order == 2
        assert [child.order for child in group.children] == [3, 4]
        assert ordered[2].order == 5

    def test_custom_start(self, interval_record):
        """Numbering can start anywhere."""
        ordered = number_canonical_steps(interval_record.extensions.workout.steps, start=0)
        assert ordered[0].order == 0


@pytest.mark.unit
class TestReindexSteps:
    """Tests for reindex_steps()."""

    def test_restamps_sequentially(self):
        """Indexes are rewritten 0..n-1 through blocks."""
        workout = Workout.model_validate(
            {
                "sport": "running",
                "steps": [
                    make_step(7),
                    make_block(2, [make_step(3), make_step(9)]),
                    make_step(1),
                ],
            }
        )
        reindexed = reindex_steps(workout.steps)
        assert reindexed[0].stepIndex == 0
        assert [step.stepIndex for step in reindexed[1].steps] == [1, 2]
        assert reindexed[1].repeatCount == 2
        assert reindexed[2].stepIndex == 3

    def test_does_not_mutate_input(self):
        """The original steps keep their indexes."""
        workout = Workout.model_validate({"sport": "running", "steps": [make_step(5)]})
        reindex_steps(workout.steps)
        assert workout.steps[0].stepIndex == 5
