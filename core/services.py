from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from readinggroup import (
    Attendance,
    GroupResult,
    ReadingStatus,
    RotationCursor,
    SeatingPolicy,
    WeeklyState,
    compute_groups,
)

from .config import Settings
from .logging import logger
from .models import (
    READING_DESCRIPTION_MAX,
    Cycle,
    CycleParticipant,
    Participant,
    new_seating_seed,
    utcnow,
)

UNSET: Any = object()


class ParticipantNotFoundError(LookupError):
    pass


class CycleNotFoundError(LookupError):
    pass


class CycleParticipantNotFoundError(LookupError):
    pass


# ----------------------------- participants -----------------------------
async def list_participants(db: AsyncSession) -> list[Participant]:
    result = await db.execute(select(Participant).order_by(func.lower(Participant.name), Participant.id))
    return list(result.scalars())


async def get_participant(db: AsyncSession, participant_id: int) -> Participant:
    participant = await db.get(Participant, participant_id)
    if not participant:
        raise ParticipantNotFoundError(participant_id)
    return participant


async def create_participant(
    db: AsyncSession,
    *,
    name: str,
    has_reading: bool = False,
    email: str | None = None,
    phone_number: str | None = None,
) -> Participant:
    participant = Participant(
        name=name.strip(),
        has_reading=has_reading,
        email=email,
        phone_number=phone_number,
    )
    db.add(participant)
    await db.flush()
    logger.info("Participant {} created", participant.id)
    return participant


async def update_participant(db: AsyncSession, participant_id: int, **fields: Any) -> Participant:
    allowed = {"name", "has_reading", "email", "phone_number"}
    required = {"name", "has_reading"}
    updates = {
        key: value
        for key, value in fields.items()
        if key in allowed and not (value is None and key in required)
    }
    if not updates:
        raise ValueError("No valid fields to update")
    participant = await get_participant(db, participant_id)
    for field, value in updates.items():
        setattr(participant, field, value)
    await db.flush()
    return participant


async def delete_participant(db: AsyncSession, participant_id: int) -> None:
    participant = await get_participant(db, participant_id)
    await db.execute(delete(CycleParticipant).where(CycleParticipant.participant_id == participant_id))
    await db.delete(participant)
    await db.flush()
    logger.info("Participant {} deleted", participant_id)


# ----------------------------- cycles -----------------------------
def week_start_for(day: date, week_start_weekday: int = 1) -> date:
    """Return the first day of the cycle that contains ``day`` (Monday is 0)."""
    return day - timedelta(days=(day.weekday() - week_start_weekday) % 7)


def seating_rng(cycle: Cycle) -> random.Random:
    """Shuffle source shared by every grouping of the cycle."""
    return random.Random(cycle.seating_seed)


def cycle_cursor(cycle: Cycle) -> RotationCursor:
    return RotationCursor(
        table_start_index=cycle.table_start_index or 0,
        lounge_start_index=cycle.lounge_start_index or 0,
    )


def carried_cursor(previous: Cycle | None) -> RotationCursor:
    """Cursor a new cycle starts from: the committed one, else where the last cycle started."""
    if previous is None:
        return RotationCursor()
    current = cycle_cursor(previous)
    return RotationCursor(
        table_start_index=(
            previous.next_table_start_index
            if previous.next_table_start_index is not None
            else current.table_start_index
        ),
        lounge_start_index=(
            previous.next_lounge_start_index
            if previous.next_lounge_start_index is not None
            else current.lounge_start_index
        ),
    )


async def get_cycle(db: AsyncSession, cycle_id: str, *, for_update: bool = False) -> Cycle:
    stmt = select(Cycle).where(Cycle.id == cycle_id)
    if for_update:
        stmt = stmt.with_for_update()
    cycle = (await db.execute(stmt)).scalar_one_or_none()
    if not cycle:
        raise CycleNotFoundError(cycle_id)
    return cycle


async def get_or_create_current_cycle(
    db: AsyncSession, *, today: date | None = None, week_start_weekday: int = 1
) -> tuple[Cycle, bool]:
    week_start = week_start_for(today or datetime.now(timezone.utc).date(), week_start_weekday)
    existing = (await db.execute(select(Cycle).where(Cycle.week_start == week_start))).scalar_one_or_none()
    if existing:
        return existing, False

    previous = (
        await db.execute(
            select(Cycle).where(Cycle.week_start < week_start).order_by(Cycle.week_start.desc()).limit(1)
        )
    ).scalar_one_or_none()
    cursor = carried_cursor(previous)
    cycle = Cycle(
        week_start=week_start,
        table_start_index=cursor.table_start_index,
        lounge_start_index=cursor.lounge_start_index,
        seating_seed=new_seating_seed(),
    )
    db.add(cycle)
    await db.flush()
    logger.bind(cycle_id=cycle.id, **cursor.as_dict()).info("Cycle created for week {}", week_start)
    return cycle, True


async def sync_cycle_participants(db: AsyncSession, cycle_id: str) -> int:
    """Make sure every participant has a weekly row; existing rows are left alone."""
    await get_cycle(db, cycle_id)
    participant_ids = list((await db.execute(select(Participant.id))).scalars())
    existing = set(
        (
            await db.execute(
                select(CycleParticipant.participant_id).where(CycleParticipant.cycle_id == cycle_id)
            )
        ).scalars()
    )
    missing = [pid for pid in participant_ids if pid not in existing]
    for pid in missing:
        db.add(CycleParticipant(cycle_id=cycle_id, participant_id=pid))
    await db.flush()
    logger.info("Cycle {} synced: {} ensured, {} added", cycle_id, len(participant_ids), len(missing))
    return len(participant_ids)


async def list_cycle_participants(db: AsyncSession, cycle_id: str) -> list[CycleParticipant]:
    await get_cycle(db, cycle_id)
    result = await db.execute(
        select(CycleParticipant)
        .join(CycleParticipant.participant)
        .options(contains_eager(CycleParticipant.participant))
        .where(CycleParticipant.cycle_id == cycle_id)
        .order_by(func.lower(Participant.name), Participant.id)
    )
    return list(result.scalars().unique())


async def get_cycle_participant(db: AsyncSession, cycle_id: str, participant_id: int) -> CycleParticipant:
    entry = await db.get(CycleParticipant, (cycle_id, participant_id))
    if not entry:
        raise CycleParticipantNotFoundError((cycle_id, participant_id))
    return entry


def normalise_reading_description(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()[:READING_DESCRIPTION_MAX]
    return trimmed or None


async def update_cycle_participant(
    db: AsyncSession,
    cycle_id: str,
    participant_id: int,
    *,
    attendance: Attendance | None = None,
    reading: ReadingStatus | None = None,
    reading_description: str | None = UNSET,
) -> CycleParticipant:
    if attendance is None and reading is None and reading_description is UNSET:
        raise ValueError("No fields to update")
    entry = await get_cycle_participant(db, cycle_id, participant_id)
    if attendance is not None:
        entry.attendance = attendance
    if reading is not None:
        entry.reading = reading
    if reading_description is not UNSET:
        entry.reading_description = normalise_reading_description(reading_description)
    entry.responded_at = utcnow()
    await db.flush()
    logger.bind(cycle_id=cycle_id, participant_id=participant_id).info(
        "Weekly state updated: attendance={} reading={}", entry.attendance.value, entry.reading.value
    )
    return entry


async def remove_cycle_participant(db: AsyncSession, cycle_id: str, participant_id: int) -> None:
    entry = await get_cycle_participant(db, cycle_id, participant_id)
    await db.delete(entry)
    await db.flush()


# ----------------------------- grouping -----------------------------
def to_weekly_state(entry: CycleParticipant) -> WeeklyState:
    participant = entry.participant
    return WeeklyState.from_mapping(
        {
            "id": participant.id,
            "name": participant.name,
            "email": participant.email,
            "phone_number": participant.phone_number,
            "has_reading": participant.has_reading,
            "attendance": entry.attendance,
            "reading": entry.reading,
            "responded_at": entry.responded_at,
            "reading_description": entry.reading_description,
        }
    )


async def load_weekly_states(db: AsyncSession, cycle_id: str) -> list[WeeklyState]:
    return [to_weekly_state(entry) for entry in await list_cycle_participants(db, cycle_id)]


def _group_options(settings: Settings) -> dict[str, Any]:
    return {
        "policy": SeatingPolicy(settings.seating_policy),
        "scheduled_quota": settings.scheduled_quota,
        "bonus_quota": settings.bonus_quota,
        "single_group_limit": settings.single_group_limit,
    }


async def compute_cycle_groups(
    db: AsyncSession, cycle_id: str, settings: Settings, rng: random.Random | None = None
) -> GroupResult:
    """Groups for the cycle using its stored cursor and seating seed. Nothing is persisted."""
    cycle = await get_cycle(db, cycle_id)
    states = await load_weekly_states(db, cycle_id)
    return compute_groups(
        states, cycle_cursor(cycle), rng=rng or seating_rng(cycle), **_group_options(settings)
    )


async def advance_cycle(
    db: AsyncSession, cycle_id: str, settings: Settings, rng: random.Random | None = None
) -> Cycle:
    """Commit the rotation: store the cursor the next cycle will start from."""
    cycle = await get_cycle(db, cycle_id, for_update=True)
    states = await load_weekly_states(db, cycle_id)
    result = compute_groups(
        states, cycle_cursor(cycle), rng=rng or seating_rng(cycle), **_group_options(settings)
    )
    cycle.next_table_start_index = result.next_cursor.table_start_index
    cycle.next_lounge_start_index = result.next_cursor.lounge_start_index
    cycle.advanced_at = utcnow()
    await db.flush()
    logger.bind(cycle_id=cycle.id, **result.next_cursor.as_dict()).info("Rotation advanced")
    return cycle
