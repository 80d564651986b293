from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from readinggroup import Attendance, ReadingStatus


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _strip_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


ParticipantName = Annotated[str, AfterValidator(_strip_name)]


class ParticipantCreate(BaseModel):
    name: ParticipantName
    has_reading: bool = False
    email: str | None = None
    phone_number: str | None = None


class ParticipantUpdate(BaseModel):
    name: ParticipantName | None = None
    has_reading: bool | None = None
    email: str | None = None
    phone_number: str | None = None


class ParticipantRead(ORMModel):
    id: int
    name: str
    email: str | None
    phone_number: str | None
    has_reading: bool


class CycleRead(ORMModel):
    id: str
    week_start: date
    table_start_index: int
    lounge_start_index: int
    next_table_start_index: int | None
    next_lounge_start_index: int | None
    seating_seed: int
    advanced_at: datetime | None
    created_at: datetime


class CycleSyncRead(BaseModel):
    ensured: int


class CycleParticipantUpdate(BaseModel):
    attendance: Attendance | None = None
    reading: ReadingStatus | None = None
    reading_description: str | None = None


class CycleParticipantRead(ORMModel):
    cycle_id: str
    participant_id: int
    attendance: Attendance
    reading: ReadingStatus
    reading_description: str | None
    responded_at: datetime | None


class WeeklyStateRead(BaseModel):
    id: int
    name: str
    email: str | None = None
    phone_number: str | None = None
    has_reading: bool = False
    attendance: Attendance
    reading: ReadingStatus
    responded_at: datetime | None = None
    reading_description: str | None = None


class CycleParticipantRow(WeeklyStateRead):
    cycle_id: str


class GroupReadersRead(BaseModel):
    scheduled: list[WeeklyStateRead] = Field(default_factory=list)
    bonus: list[WeeklyStateRead] = Field(default_factory=list)


class RotationCursorRead(BaseModel):
    table_start_index: int = 0
    lounge_start_index: int = 0


class ReaderRostersRead(BaseModel):
    table: list[WeeklyStateRead] = Field(default_factory=list)
    lounge: list[WeeklyStateRead] = Field(default_factory=list)
    start_index: RotationCursorRead


class GroupResultRead(BaseModel):
    table: list[WeeklyStateRead]
    lounge: list[WeeklyStateRead]
    readers: dict[str, GroupReadersRead]
    up_next: dict[str, WeeklyStateRead | None]
    rosters: ReaderRostersRead
    next_cursor: RotationCursorRead
    error: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class AdminSessionRead(BaseModel):
    authenticated: bool


class AuditLogRead(ORMModel):
    id: int
    actor: str
    action: str
    meta: dict[str, Any]
    created_at: datetime
