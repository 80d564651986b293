from __future__ import annotations

import random
import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base
from readinggroup import Attendance, ReadingStatus

READING_DESCRIPTION_MAX = 300


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_seating_seed() -> int:
    return random.randrange(2**31)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Participant(Base, TimestampMixin):
    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    has_reading: Mapped[bool] = mapped_column(Boolean, default=False)


class Cycle(Base, TimestampMixin):
    __tablename__ = "cycles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    week_start: Mapped[date] = mapped_column(Date, unique=True)
    table_start_index: Mapped[int] = mapped_column(Integer, default=0)
    lounge_start_index: Mapped[int] = mapped_column(Integer, default=0)
    next_table_start_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    next_lounge_start_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # fixes the seating shuffle so previews and the committed rotation agree
    seating_seed: Mapped[int] = mapped_column(Integer, default=new_seating_seed)
    advanced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CycleParticipant(Base):
    __tablename__ = "cycle_participants"

    cycle_id: Mapped[str] = mapped_column(ForeignKey("cycles.id", ondelete="CASCADE"), primary_key=True)
    participant_id: Mapped[int] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"), primary_key=True
    )
    attendance: Mapped[Attendance] = mapped_column(
        Enum(Attendance, name="attendance_status", native_enum=False), default=Attendance.unknown
    )
    reading: Mapped[ReadingStatus] = mapped_column(
        Enum(ReadingStatus, name="reading_status", native_enum=False), default=ReadingStatus.unassigned
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reading_description: Mapped[str | None] = mapped_column(
        String(READING_DESCRIPTION_MAX), nullable=True
    )

    participant: Mapped["Participant"] = relationship(lazy="joined")


class AuditLog(Base, TimestampMixin):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    actor: Mapped[str] = mapped_column(String(255))
    action: Mapped[str] = mapped_column(String(255))
    meta: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
