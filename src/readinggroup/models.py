"""Data models describing participants, their weekly state and the rotation cursor."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping

from .exceptions import ValidationError


class _LenientEnum(str, enum.Enum):
    """String enum whose first member is the fallback for unknown values."""

    @classmethod
    def default(cls):
        return next(iter(cls))

    @classmethod
    def parse(cls, value: object):
        """Return the member matching ``value`` or the default member.

        Weekly state arrives from an untrusted store, so anything outside the
        closed set (``None``, typos, other types) maps to the default instead
        of failing.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.default()


class Attendance(_LenientEnum):
    unknown = "unknown"
    yes = "yes"
    no = "no"
    maybe = "maybe"


class ReadingStatus(_LenientEnum):
    # still in rotation, nobody asked yet
    unassigned = "unassigned"
    # being asked this week, still in rotation
    pending = "pending"
    # has pages this week
    confirmed = "confirmed"
    # no pages this week, skipped for scheduling
    deferred = "deferred"


class SeatingPolicy(str, enum.Enum):
    """Who gets a seat for the week."""

    strict = "strict"
    permissive = "permissive"


class SeatingGroup(str, enum.Enum):
    table = "table"
    lounge = "lounge"


@dataclass(slots=True, frozen=True)
class Participant:
    """Master record for a member of the reading group."""

    id: int
    name: str
    email: str | None = None
    phone_number: str | None = None
    has_reading: bool = False

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValidationError("Participant name must not be empty.")
        object.__setattr__(self, "name", name)


@dataclass(slots=True, frozen=True)
class WeeklyState:
    """A participant together with their state for one cycle."""

    participant: Participant
    attendance: Attendance = Attendance.unknown
    reading: ReadingStatus = ReadingStatus.unassigned
    responded_at: datetime | None = None
    reading_description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "attendance", Attendance.parse(self.attendance))
        object.__setattr__(self, "reading", ReadingStatus.parse(self.reading))

    @property
    def id(self) -> int:
        return self.participant.id

    @property
    def name(self) -> str:
        return self.participant.name

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "WeeklyState":
        """Build a state from a flat row of participant and weekly fields."""

        participant = Participant(
            id=int(row["id"]),
            name=str(row.get("name") or ""),
            email=row.get("email"),
            phone_number=row.get("phone_number"),
            has_reading=bool(row.get("has_reading", False)),
        )
        return cls(
            participant=participant,
            attendance=row.get("attendance"),
            reading=row.get("reading"),
            responded_at=row.get("responded_at"),
            reading_description=row.get("reading_description"),
        )

    def as_dict(self) -> dict[str, Any]:
        """Return a flat, serialisable representation."""

        return {
            "id": self.participant.id,
            "name": self.participant.name,
            "email": self.participant.email,
            "phone_number": self.participant.phone_number,
            "has_reading": self.participant.has_reading,
            "attendance": self.attendance.value,
            "reading": self.reading.value,
            "responded_at": self.responded_at.isoformat() if self.responded_at else None,
            "reading_description": self.reading_description,
        }


@dataclass(slots=True, frozen=True)
class RotationCursor:
    """Where the alphabetical reading rotation left off, per seating group."""

    table_start_index: int = 0
    lounge_start_index: int = 0

    def for_group(self, group: SeatingGroup) -> int:
        if group is SeatingGroup.table:
            return self.table_start_index
        return self.lounge_start_index

    def with_group(self, group: SeatingGroup, index: int) -> "RotationCursor":
        if group is SeatingGroup.table:
            return replace(self, table_start_index=index)
        return replace(self, lounge_start_index=index)

    def as_dict(self) -> dict[str, int]:
        return {
            "table_start_index": self.table_start_index,
            "lounge_start_index": self.lounge_start_index,
        }
