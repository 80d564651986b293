from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core import services
from core.audit import write_audit_log
from core.config import Settings
from core.models import Cycle, CycleParticipant
from core.schemas import (
    CycleParticipantRead,
    CycleParticipantRow,
    CycleParticipantUpdate,
    CycleRead,
    CycleSyncRead,
    GroupResultRead,
)

from .dependencies import get_app_settings, get_session, require_admin

router = APIRouter(prefix="/cycles", tags=["cycles"], dependencies=[Depends(require_admin)])


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


@router.get("/current", response_model=CycleRead)
async def current_cycle(
    response: Response,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> Cycle:
    cycle, created = await services.get_or_create_current_cycle(
        session, week_start_weekday=settings.week_start_weekday
    )
    if created:
        await session.commit()
        response.status_code = status.HTTP_201_CREATED
    return cycle


@router.post("/{cycle_id}/sync", response_model=CycleSyncRead)
async def sync_cycle(
    cycle_id: str,
    session: AsyncSession = Depends(get_session),
    admin: str = Depends(require_admin),
) -> CycleSyncRead:
    try:
        ensured = await services.sync_cycle_participants(session, cycle_id)
    except services.CycleNotFoundError:
        raise _not_found("Cycle not found")
    await write_audit_log(session, actor=admin, action="sync_cycle", meta={"cycle_id": cycle_id, "ensured": ensured})
    await session.commit()
    return CycleSyncRead(ensured=ensured)


@router.get("/{cycle_id}/participants", response_model=list[CycleParticipantRow])
async def list_cycle_participants(cycle_id: str, session: AsyncSession = Depends(get_session)) -> list[CycleParticipantRow]:
    try:
        entries = await services.list_cycle_participants(session, cycle_id)
    except services.CycleNotFoundError:
        raise _not_found("Cycle not found")
    return [
        CycleParticipantRow(cycle_id=entry.cycle_id, **services.to_weekly_state(entry).as_dict())
        for entry in entries
    ]


@router.patch("/{cycle_id}/participants/{participant_id}", response_model=CycleParticipantRead)
async def update_cycle_participant(
    cycle_id: str,
    participant_id: int,
    payload: CycleParticipantUpdate,
    session: AsyncSession = Depends(get_session),
    admin: str = Depends(require_admin),
) -> CycleParticipant:
    fields = payload.model_dump(exclude_unset=True)
    try:
        entry = await services.update_cycle_participant(
            session,
            cycle_id,
            participant_id,
            attendance=fields.get("attendance"),
            reading=fields.get("reading"),
            reading_description=fields.get("reading_description", services.UNSET),
        )
    except services.CycleParticipantNotFoundError:
        raise _not_found("Participant is not part of this cycle")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    await write_audit_log(
        session,
        actor=admin,
        action="update_cycle_participant",
        meta={"cycle_id": cycle_id, "participant_id": participant_id, "fields": sorted(fields)},
    )
    await session.commit()
    return entry


@router.delete("/{cycle_id}/participants/{participant_id}")
async def remove_cycle_participant(
    cycle_id: str,
    participant_id: int,
    session: AsyncSession = Depends(get_session),
    admin: str = Depends(require_admin),
) -> dict[str, bool]:
    try:
        await services.remove_cycle_participant(session, cycle_id, participant_id)
    except services.CycleParticipantNotFoundError:
        raise _not_found("Participant is not part of this cycle")
    await write_audit_log(
        session,
        actor=admin,
        action="remove_cycle_participant",
        meta={"cycle_id": cycle_id, "participant_id": participant_id},
    )
    await session.commit()
    return {"success": True}


@router.get("/{cycle_id}/groups", response_model=GroupResultRead)
async def cycle_groups(
    cycle_id: str,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> GroupResultRead:
    try:
        result = await services.compute_cycle_groups(session, cycle_id, settings)
    except services.CycleNotFoundError:
        raise _not_found("Cycle not found")
    return GroupResultRead.model_validate(result.as_dict())


@router.post("/{cycle_id}/advance", response_model=CycleRead)
async def advance_cycle(
    cycle_id: str,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
    admin: str = Depends(require_admin),
) -> Cycle:
    try:
        cycle = await services.advance_cycle(session, cycle_id, settings)
    except services.CycleNotFoundError:
        raise _not_found("Cycle not found")
    await write_audit_log(
        session,
        actor=admin,
        action="advance_cycle",
        meta={
            "cycle_id": cycle_id,
            "next_table_start_index": cycle.next_table_start_index,
            "next_lounge_start_index": cycle.next_lounge_start_index,
        },
    )
    await session.commit()
    return cycle
