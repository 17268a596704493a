"""Pydantic models for the Garmin Connect workout JSON (GCN) format."""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class SportType(BaseModel):
    sportTypeId: Optional[int] = None
    sportTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None


class StepType(BaseModel):
    stepTypeId: Optional[int] = None
    stepTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None


class EndCondition(BaseModel):
    conditionTypeId: Optional[int] = None
    conditionTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None
    displayable: Optional[bool] = None


class TargetType(BaseModel):
    workoutTargetTypeId: Optional[int] = None
    workoutTargetTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None


class StrokeType(BaseModel):
    strokeTypeId: Optional[int] = None
    strokeTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None


class EquipmentType(BaseModel):
    equipmentTypeId: Optional[int] = None
    equipmentTypeKey: Optional[str] = None
    displayOrder: Optional[int] = None


class PoolLengthUnit(BaseModel):
    unitId: Optional[int] = None
    unitKey: Optional[str] = None
    factor: Optional[float] = None


class ExecutableStepDTO(BaseModel):
    type: Literal["ExecutableStepDTO"] = "ExecutableStepDTO"
    stepId: Optional[int] = None
    stepOrder: Optional[int] = None
    stepType: Optional[StepType] = None
    description: Optional[str] = None
    endCondition: Optional[EndCondition] = None
    endConditionValue: Optional[float] = None
    targetType: Optional[TargetType] = None
    targetValueOne: Optional[float] = None
    targetValueTwo: Optional[float] = None
    zoneNumber: Optional[int] = None
    secondaryTargetType: Optional[TargetType] = None
    secondaryTargetValueOne: Optional[float] = None
    secondaryTargetValueTwo: Optional[float] = None
    secondaryZoneNumber: Optional[int] = None
    strokeType: Optional[StrokeType] = None
    equipmentType: Optional[EquipmentType] = None


class RepeatGroupDTO(BaseModel):
    type: Literal["RepeatGroupDTO"] = "RepeatGroupDTO"
    stepId: Optional[int] = None
    stepOrder: Optional[int] = None
    stepType: Optional[StepType] = None
    numberOfIterations: Optional[int] = None
    endCondition: Optional[EndCondition] = None
    endConditionValue: Optional[float] = None
    workoutSteps: List["GarminStepDTO"] = Field(default_factory=list)


GarminStepDTO = Annotated[
    Union[ExecutableStepDTO, RepeatGroupDTO], Field(discriminator="type")
]


class WorkoutSegment(BaseModel):
    segmentOrder: Optional[int] = None
    sportType: Optional[SportType] = None
    workoutSteps: List[GarminStepDTO] = Field(default_factory=list)


class GarminWorkoutDTO(BaseModel):
    workoutId: Optional[int] = None
    ownerId: Optional[int] = None
    workoutName: Optional[str] = None
    description: Optional[str] = None
    sportType: Optional[SportType] = None
    poolLength: Optional[float] = None
    poolLengthUnit: Optional[PoolLengthUnit] = None
    workoutSegments: List[WorkoutSegment] = Field(default_factory=list)


RepeatGroupDTO.model_rebuild()
