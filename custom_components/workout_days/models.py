"""Day-plan and weight-entry models."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Any
from uuid import uuid4

from .date_utils import parse_date
from .errors import InvalidInputError

PLACEHOLDER_PREFIX = "local-day-"


class DayKind(StrEnum):
    WORKOUT = "workout"
    REST = "rest"
    EMPTY = "empty"


class DayStatus(StrEnum):
    """Completion state of a planned day. Stored as two booleans."""

    UNSET = "unset"
    COMPLETED = "completed"
    MISSED = "missed"

    @classmethod
    def from_flags(cls, *, completed: bool, missed: bool) -> DayStatus:
        # A row with both flags set predates the exclusivity rule; completed wins.
        if completed:
            return cls.COMPLETED
        if missed:
            return cls.MISSED
        return cls.UNSET


def placeholder_id() -> str:
    return f"{PLACEHOLDER_PREFIX}{uuid4().hex[:10]}"


def _clean_exercises(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise InvalidInputError("exercises must be a list of names")
    return tuple(str(x).strip() for x in value if str(x or "").strip())


def _clean_duration(value: Any) -> int | None:
    if value in (None, "", 0):
        return None
    try:
        minutes = int(value)
    except (TypeError, ValueError) as err:
        raise InvalidInputError(f"Invalid duration: {value!r}") from err
    if minutes <= 0:
        raise InvalidInputError("duration must be a positive number of minutes")
    return minutes


@dataclass(frozen=True)
class DayPlan:
    """One owner's schedule for one calendar day."""

    id: str
    date: date
    kind: DayKind = DayKind.EMPTY
    exercises: tuple[str, ...] = ()
    duration: int | None = None
    notes: str | None = None
    status: DayStatus = DayStatus.UNSET
    archived: bool = False
    owner_id: str = ""

    def __post_init__(self) -> None:
        # Unplanned days can never be completed or missed.
        if self.kind is DayKind.EMPTY and self.status is not DayStatus.UNSET:
            object.__setattr__(self, "status", DayStatus.UNSET)

    @property
    def completed(self) -> bool:
        return self.status is DayStatus.COMPLETED

    @property
    def missed(self) -> bool:
        return self.status is DayStatus.MISSED

    @property
    def is_placeholder(self) -> bool:
        return not self.id or self.id.startswith(PLACEHOLDER_PREFIX)

    def with_status(self, status: DayStatus) -> DayPlan:
        return replace(self, status=status)

    @classmethod
    def empty(cls, day: date, *, owner_id: str = "") -> DayPlan:
        return cls(id=placeholder_id(), date=day, owner_id=owner_id)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> DayPlan:
        try:
            kind = DayKind(str(row.get("type") or DayKind.EMPTY))
        except ValueError:
            kind = DayKind.EMPTY
        return cls(
            id=str(row.get("id") or ""),
            date=parse_date(row.get("date")),
            kind=kind,
            exercises=tuple(str(x) for x in (row.get("exercises") or []) if str(x or "").strip()),
            duration=int(row["duration"]) if row.get("duration") else None,
            notes=str(row["notes"]) if row.get("notes") else None,
            status=DayStatus.from_flags(
                completed=bool(row.get("completed")),
                missed=bool(row.get("missed")),
            ),
            archived=bool(row.get("archived")),
            owner_id=str(row.get("owner_id") or ""),
        )

    @classmethod
    def from_form(cls, payload: dict[str, Any], *, owner_id: str = "") -> DayPlan:
        """Build a day from user input, rejecting anything malformed."""
        raw_kind = str(payload.get("type") or payload.get("kind") or DayKind.EMPTY)
        try:
            kind = DayKind(raw_kind)
        except ValueError as err:
            raise InvalidInputError(f"Invalid day type: {raw_kind!r}") from err
        status = DayStatus.from_flags(
            completed=bool(payload.get("completed")),
            missed=bool(payload.get("missed")),
        )
        notes = str(payload.get("notes") or "").strip() or None
        return cls(
            id=str(payload.get("id") or "") or placeholder_id(),
            date=parse_date(payload.get("date")),
            kind=kind,
            exercises=_clean_exercises(payload.get("exercises")),
            duration=_clean_duration(payload.get("duration")),
            notes=notes,
            status=status,
            owner_id=owner_id,
        )

    def to_row(self, *, owner_id: str | None = None) -> dict[str, Any]:
        """Storage shape. Placeholder ids are never written."""
        row: dict[str, Any] = {
            "owner_id": owner_id if owner_id is not None else self.owner_id,
            "date": self.date.isoformat(),
            "type": str(self.kind),
            "exercises": list(self.exercises),
            "duration": self.duration,
            "notes": self.notes,
            "completed": self.completed,
            "missed": self.missed,
            "archived": self.archived,
        }
        if not self.is_placeholder:
            row["id"] = self.id
        return row

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "type": str(self.kind),
            "exercises": list(self.exercises),
            "duration": self.duration,
            "notes": self.notes,
            "status": str(self.status),
            "completed": self.completed,
            "missed": self.missed,
            "archived": self.archived,
        }


@dataclass
class WeightEntry:
    id: str
    owner_id: str
    weight: float
    date: date
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> WeightEntry:
        return cls(
            id=str(row.get("id") or ""),
            owner_id=str(row.get("owner_id") or ""),
            weight=float(row.get("weight") or 0),
            date=parse_date(row.get("date")),
            notes=str(row["notes"]) if row.get("notes") else None,
            created_at=str(row.get("created_at") or ""),
            updated_at=str(row.get("updated_at") or ""),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "weight": self.weight,
            "date": self.date.isoformat(),
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
