"""
Canonical record envelope.

Every conversion passes through a CanonicalRecord: readers build one from a
vendor payload, writers serialize one back out. The record is frozen once
constructed.

Examples:
    >>> record = CanonicalRecord.model_validate({
    ...     "version": "1.0",
    ...     "type": "workout",
    ...     "metadata": {"created": "2024-01-15T10:30:00Z", "sport": "cycling"},
    ... })
    >>> record.model_dump(mode="json", exclude_none=True)
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from domain.models.activity import Event, Lap, Record, Session
from domain.models.workout import Workout

CANONICAL_VERSION = "1.0"

RecordType = Literal["workout", "activity", "course", "structured_workout"]


class Metadata(BaseModel):
    """
    File-level metadata.

    ``product`` and ``serialNumber`` are numbers on the wire but carried as
    strings; they are either digit strings or absent.
    """

    created: datetime = Field(..., description="ISO-8601 creation timestamp")
    sport: str = Field(..., min_length=1)
    subSport: Optional[str] = None
    manufacturer: Optional[str] = None
    product: Optional[str] = Field(default=None, pattern=r"^\d+$")
    serialNumber: Optional[str] = Field(default=None, pattern=r"^\d+$")

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class ZwiftExtension(BaseModel):
    author: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    durationType: Optional[Literal["time", "distance"]] = None
    thresholdSecPerKm: Optional[float] = Field(default=None, gt=0)

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class Extensions(BaseModel):
    """
    Named extension sub-documents.

    The key set is closed; each key has its own schema. ``fit``, ``tcx`` and
    ``garmin`` hold raw vendor fields that have no first-class home.
    """

    workout: Optional[Workout] = None
    structured_workout: Optional[Workout] = None
    zwift: Optional[ZwiftExtension] = None
    fit: Optional[Dict[str, Any]] = None
    tcx: Optional[Dict[str, Any]] = None
    garmin: Optional[Dict[str, Any]] = None

    model_config = {"frozen": True, "extra": "forbid", "allow_inf_nan": False}


class CanonicalRecord(BaseModel):
    """The vendor-neutral document every conversion passes through."""

    version: str = Field(..., pattern=r"^\d+\.\d+$")
    type: RecordType
    metadata: Metadata
    sessions: Optional[List[Session]] = None
    laps: Optional[List[Lap]] = None
    records: Optional[List[Record]] = None
    events: Optional[List[Event]] = None
    extensions: Optional[Extensions] = None

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the exchanged JSON document shape."""
        return self.model_dump(mode="json", exclude_none=True)

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "allow_inf_nan": False,
        "json_schema_extra": {
            "examples": [
                {
                    "version": "1.0",
                    "type": "workout",
                    "metadata": {"created": "2024-01-15T10:30:00Z", "sport": "running"},
                }
            ]
        },
    }
