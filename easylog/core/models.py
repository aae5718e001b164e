"""Entity models shared by the store, the CSV codec and the commands.

Relationships between entities are plain UUID fields. Deleting an entity
never rewrites the ids that point at it; lookups resolve dangling ids to
placeholders instead.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from easylog.core.constants import OTHER_LABEL
from easylog.utils.dates import from_iso, to_iso, utc_now


class ExerciseCategory(str, Enum):
    """Equipment category of an exercise."""

    BARBELL = "Barbell"
    DUMBBELL = "Dumbbell"
    MACHINE = "Machine"
    BODYWEIGHT = "Bodyweight"
    CABLE = "Cable"
    OTHER = OTHER_LABEL

    @classmethod
    def parse(cls, value: Optional[str]) -> "ExerciseCategory":
        """Map a canonical label to a category, falling back to Other."""
        for member in cls:
            if member.value == value:
                return member
        return cls.OTHER


@dataclass
class MuscleGroup:
    name: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MuscleGroup":
        return cls(id=uuid.UUID(data["id"]), name=str(data["name"]))


@dataclass
class Exercise:
    """A named movement with ordered muscle groups; the first is primary."""

    name: str
    muscle_group_ids: List[uuid.UUID] = field(default_factory=list)
    category: ExerciseCategory = ExerciseCategory.OTHER
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Exercise name must not be empty")
        if not isinstance(self.category, ExerciseCategory):
            self.category = ExerciseCategory.parse(self.category)

    @property
    def primary_muscle_group_id(self) -> Optional[uuid.UUID]:
        return self.muscle_group_ids[0] if self.muscle_group_ids else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "muscleGroupIDs": [str(group_id) for group_id in self.muscle_group_ids],
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        return cls(
            id=uuid.UUID(data["id"]),
            name=str(data["name"]),
            muscle_group_ids=[uuid.UUID(value) for value in data.get("muscleGroupIDs", [])],
            category=ExerciseCategory.parse(data.get("category")),
        )


@dataclass
class WorkoutTemplate:
    name: str
    exercise_ids: List[uuid.UUID] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "exerciseIDs": [str(exercise_id) for exercise_id in self.exercise_ids],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutTemplate":
        return cls(
            id=uuid.UUID(data["id"]),
            name=str(data["name"]),
            exercise_ids=[uuid.UUID(value) for value in data.get("exerciseIDs", [])],
        )


@dataclass
class LoggedSet:
    """One set of one exercise inside a session."""

    exercise_id: uuid.UUID
    set_number: int
    weight: float = 0.0
    reps: int = 0
    is_completed: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        self.weight = float(self.weight)
        if self.weight < 0:
            raise ValueError("Weight must not be negative")
        if self.reps < 0:
            raise ValueError("Reps must not be negative")

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "exerciseID": str(self.exercise_id),
            "setNumber": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "isCompleted": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggedSet":
        return cls(
            id=uuid.UUID(data["id"]),
            exercise_id=uuid.UUID(data["exerciseID"]),
            set_number=int(data["setNumber"]),
            weight=float(data.get("weight", 0.0)),
            reps=int(data.get("reps", 0)),
            is_completed=bool(data.get("isCompleted", False)),
        )


@dataclass
class WorkoutSession:
    """A logging session.

    ``template_name`` is copied when the session starts, so renaming the
    template later does not rename past sessions. A session is active
    until it has an end date.
    """

    template_name: str
    template_id: Optional[uuid.UUID] = None
    start_date: datetime = field(default_factory=utc_now)
    end_date: Optional[datetime] = None
    sets: List[LoggedSet] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_active(self) -> bool:
        return self.end_date is None

    @property
    def duration(self) -> Optional[timedelta]:
        if self.end_date is None:
            return None
        return self.end_date - self.start_date

    @property
    def total_sets_count(self) -> int:
        return len(self.sets)

    @property
    def completed_sets_count(self) -> int:
        return sum(1 for logged in self.sets if logged.is_completed)

    @property
    def total_reps(self) -> int:
        return sum(logged.reps for logged in self.sets)

    @property
    def total_volume(self) -> float:
        return sum(logged.volume for logged in self.sets)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "templateID": str(self.template_id) if self.template_id else None,
            "templateName": self.template_name,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "sets": [logged.to_dict() for logged in self.sets],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkoutSession":
        template_id = data.get("templateID")
        start_date = from_iso(data.get("startDate"))
        return cls(
            id=uuid.UUID(data["id"]),
            template_id=uuid.UUID(template_id) if template_id else None,
            template_name=str(data.get("templateName", "")),
            start_date=start_date or utc_now(),
            end_date=from_iso(data.get("endDate")),
            sets=[LoggedSet.from_dict(item) for item in data.get("sets", [])],
        )


@dataclass
class ImportResult:
    """Report accumulated by a CSV import."""

    sessions_imported: int = 0
    sets_imported: int = 0
    exercises_created: int = 0
    rows_skipped: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        parts: List[str] = []
        if self.sessions_imported:
            parts.append(f"{self.sessions_imported} session(s) imported")
        if self.sets_imported:
            parts.append(f"{self.sets_imported} set(s) imported")
        if self.exercises_created:
            parts.append(f"{self.exercises_created} exercise(s) created")
        if self.rows_skipped:
            parts.append(f"{self.rows_skipped} row(s) skipped")
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        return "\n".join(parts) if parts else "Nothing to import"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessions_imported": self.sessions_imported,
            "sets_imported": self.sets_imported,
            "exercises_created": self.exercises_created,
            "rows_skipped": self.rows_skipped,
            "errors": list(self.errors),
        }
