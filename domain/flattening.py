"""
Repetition flattening engine.

Vendor formats describe workouts as trees: a step is either a leaf action or a
repeat group holding leaves and, in some formats, further repeat groups. The
canonical form allows exactly one level of repetition, so readers build a
vendor tree out of StepLeaf/RepeatGroup nodes and hand it to
``flatten_step_tree``; writers walk canonical steps with
``number_canonical_steps`` to get vendor step orders back.

Flattening rules:
- One step-index counter is shared across the whole tree (and across vendor
  segments when the caller passes the same StepIndexCounter).
- A leaf becomes a step stamped with the current counter value, then the
  counter increments.
- A top-level repeat group becomes a RepetitionBlock with the group's
  iteration count; its leaves are numbered normally.
- A repeat group nested inside another group is inlined into the enclosing
  block. Its iteration count is discarded and a warning is logged. Canonical
  blocks never nest, so a round trip through such a file keeps the step count
  but not the inner iteration count.

Usage:
    from domain.flattening import RepeatGroup, StepLeaf, flatten_step_tree

    tree = [
        RepeatGroup(iterations=3, children=[StepLeaf(a), StepLeaf(b)]),
        StepLeaf(c),
    ]
    steps = flatten_step_tree(tree, map_leaf=lambda payload, index: {...})
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar, Union

from domain.models import RepetitionBlock, StepOrBlock, WorkoutStep

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StepLeaf(Generic[T]):
    """A vendor step that performs an action."""

    payload: T


@dataclass(frozen=True)
class RepeatGroup(Generic[T]):
    """A vendor repeat group; children may be leaves or further groups."""

    iterations: int
    children: Sequence[Union[StepLeaf[T], "RepeatGroup[T]"]] = field(default_factory=list)
    id: Optional[str] = None


VendorNode = Union[StepLeaf[T], RepeatGroup[T]]

LeafMapper = Callable[[T, int], Dict[str, Any]]


class StepIndexCounter:
    """Monotonic stepIndex source shared by one flattening pass."""

    def __init__(self, start: int = 0) -> None:
        self.value = start

    def next(self) -> int:
        current = self.value
        self.value += 1
        return current


def flatten_step_tree(
    nodes: Sequence[VendorNode],
    map_leaf: LeafMapper,
    *,
    counter: Optional[StepIndexCounter] = None,
    log: Optional[logging.Logger] = None,
) -> List[Dict[str, Any]]:
    """
    Flatten a vendor step tree into canonical step/block documents.

    Args:
        nodes: Top-level vendor nodes in document order
        map_leaf: Builds a canonical step document from a leaf payload and
            the stepIndex assigned to it
        counter: Shared counter, for numbering several segments in one pass
        log: Logger collaborator for the nested-group warning

    Returns:
        List of step documents and ``{"repeatCount", "steps"}`` block documents
    """
    counter = counter if counter is not None else StepIndexCounter()
    log = log or logger
    flattened: List[Dict[str, Any]] = []
    for node in nodes:
        if isinstance(node, RepeatGroup):
            block: Dict[str, Any] = {
                "repeatCount": max(int(node.iterations or 1), 1),
                "steps": _inline_children(node.children, map_leaf, counter, log),
            }
            if node.id is not None:
                block["id"] = node.id
            flattened.append(block)
        else:
            flattened.append(map_leaf(node.payload, counter.next()))
    return flattened


def _inline_children(
    children: Sequence[VendorNode],
    map_leaf: LeafMapper,
    counter: StepIndexCounter,
    log: logging.Logger,
) -> List[Dict[str, Any]]:
    steps: List[Dict[str, Any]] = []
    for child in children:
        if isinstance(child, RepeatGroup):
            log.warning(
                "Nested repeat groups are flattened",
                extra={"iterations": child.iterations},
            )
            steps.extend(_inline_children(child.children, map_leaf, counter, log))
        else:
            steps.append(map_leaf(child.payload, counter.next()))
    return steps


# ---------------------------------------------------------------------------
# Canonical -> vendor ordering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderedStep:
    order: int
    step: WorkoutStep


@dataclass(frozen=True)
class OrderedGroup:
    """A RepetitionBlock placed at ``order``; its children follow it."""

    order: int
    block: RepetitionBlock
    children: List[OrderedStep]


def number_canonical_steps(
    steps: Sequence[StepOrBlock], start: int = 1
) -> List[Union[OrderedStep, OrderedGroup]]:
    """
    Assign sequential vendor orders to canonical steps.

    Each RepetitionBlock becomes exactly one vendor repeat group taking the
    next order, with its children numbered sequentially after it.
    """
    order = start
    ordered: List[Union[OrderedStep, OrderedGroup]] = []
    for entry in steps:
        if isinstance(entry, RepetitionBlock):
            group_order = order
            order += 1
            children = []
            for child in entry.steps:
                children.append(OrderedStep(order=order, step=child))
                order += 1
            ordered.append(OrderedGroup(order=group_order, block=entry, children=children))
        else:
            ordered.append(OrderedStep(order=order, step=entry))
            order += 1
    return ordered


def reindex_steps(steps: Sequence[StepOrBlock], start: int = 0) -> List[StepOrBlock]:
    """Restamp stepIndex values sequentially, descending into blocks."""
    counter = StepIndexCounter(start)
    reindexed: List[StepOrBlock] = []
    for entry in steps:
        if isinstance(entry, RepetitionBlock):
            children = [
                child.model_copy(update={"stepIndex": counter.next()}) for child in entry.steps
            ]
            reindexed.append(entry.model_copy(update={"steps": children}))
        else:
            reindexed.append(entry.model_copy(update={"stepIndex": counter.next()}))
    return reindexed
