"""
Structured workout models.

A Workout is an ordered list of steps. Each entry is either a WorkoutStep or a
RepetitionBlock; blocks hold steps only, so repetition never nests more than
one level deep. Vendor trees with deeper nesting are flattened before they
reach this level (see ``domain.flattening``).

Examples:
    >>> from domain.models import Workout, WorkoutStep, RepetitionBlock

    >>> workout = Workout(
    ...     name="VO2 Intervals",
    ...     sport="cycling",
    ...     steps=[
    ...         WorkoutStep(
    ...             stepIndex=0,
    ...             durationType="time",
    ...             duration={"type": "time", "seconds": 600},
    ...             targetType="open",
    ...             target={"type": "open"},
    ...             intensity="warmup",
    ...         ),
    ...         RepetitionBlock(
    ...             repeatCount=5,
    ...             steps=[...],
    ...         ),
    ...     ],
    ... )
"""

from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, model_validator

from domain.models.duration import Duration, DurationType
from domain.models.target import Target, TargetType

Intensity = Literal["warmup", "active", "recovery", "rest", "cooldown", "interval", "other"]

Equipment = Literal[
    "none",
    "swim_fins",
    "swim_kickboard",
    "swim_paddles",
    "swim_pull_buoy",
    "swim_snorkel",
]

MAX_NOTES_LENGTH = 256


class WorkoutStep(BaseModel):
    """
    A single step of a structured workout.

    ``durationType``/``targetType`` duplicate the ``type`` tag of ``duration``
    and ``target``; they are kept on the step because every vendor format
    indexes steps by these kinds, and the two must agree.
    """

    stepIndex: int = Field(
        ..., ge=0, description="Position in the flattened step sequence"
    )
    name: Optional[str] = Field(default=None, description="Step label")
    durationType: DurationType
    duration: Duration
    targetType: TargetType
    target: Target
    intensity: Optional[Intensity] = None
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    equipment: Optional[Equipment] = None
    extensions: Optional[Dict[str, Any]] = Field(
        default=None, description="Vendor data attached to this step"
    )

    @model_validator(mode="after")
    def check_kind_tags(self) -> "WorkoutStep":
        """Ensure durationType/targetType match the variants they describe."""
        if self.durationType != self.duration.type:
            raise ValueError(
                f"durationType '{self.durationType}' does not match duration type "
                f"'{self.duration.type}'"
            )
        if self.targetType != self.target.type:
            raise ValueError(
                f"targetType '{self.targetType}' does not match target type "
                f"'{self.target.type}'"
            )
        return self

    @property
    def power_range_unit(self) -> str:
        """
        Unit of a power ``range`` target.

        Ranges are in watts unless a vendor bag on the step marks them as
        percent of FTP (``{"powerUnit": "percent_ftp"}``).
        """
        for bag in (self.extensions or {}).values():
            if isinstance(bag, dict) and bag.get("powerUnit") == "percent_ftp":
                return "percent_ftp"
        return "watts"

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "allow_inf_nan": False,
        "json_schema_extra": {
            "examples": [
                {
                    "stepIndex": 0,
                    "durationType": "time",
                    "duration": {"type": "time", "seconds": 300},
                    "targetType": "power",
                    "target": {"type": "power", "value": {"unit": "watts", "value": 200}},
                    "intensity": "warmup",
                }
            ]
        },
    }


class RepetitionBlock(BaseModel):
    """A flat group of steps repeated ``repeatCount`` times."""

    id: Optional[str] = None
    repeatCount: int = Field(..., ge=1, description="Number of times the steps run")
    steps: List[WorkoutStep] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


def _step_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "block" if "repeatCount" in value else "step"
    return "block" if isinstance(value, RepetitionBlock) else "step"


StepOrBlock = Annotated[
    Union[
        Annotated[WorkoutStep, Tag("step")],
        Annotated[RepetitionBlock, Tag("block")],
    ],
    Discriminator(_step_kind),
]


class Workout(BaseModel):
    """
    A structured workout carried in the ``workout`` or ``structured_workout``
    extension of a canonical record.
    """

    name: Optional[str] = Field(default=None, description="Workout title")
    sport: str = Field(..., min_length=1)
    subSport: Optional[str] = None
    poolLength: Optional[float] = Field(default=None, gt=0)
    poolLengthUnit: Optional[Literal["meters"]] = None
    steps: List[StepOrBlock] = Field(default_factory=list)
    extensions: Optional[Dict[str, Any]] = None

    def iter_steps(self) -> Iterator[WorkoutStep]:
        """Yield every WorkoutStep in order, descending into blocks."""
        for entry in self.steps:
            if isinstance(entry, RepetitionBlock):
                yield from entry.steps
            else:
                yield entry

    @property
    def step_count(self) -> int:
        return sum(1 for _ in self.iter_steps())

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}
