from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core import services
from core.audit import write_audit_log
from core.models import Participant
from core.schemas import ParticipantCreate, ParticipantRead, ParticipantUpdate

from .dependencies import get_session

router = APIRouter(prefix="/participants", tags=["participants"])


@router.get("", response_model=list[ParticipantRead])
async def list_participants(session: AsyncSession = Depends(get_session)) -> list[Participant]:
    return await services.list_participants(session)


@router.post("", response_model=ParticipantRead, status_code=status.HTTP_201_CREATED)
async def create_participant(payload: ParticipantCreate, session: AsyncSession = Depends(get_session)) -> Participant:
    participant = await services.create_participant(session, **payload.model_dump())
    await write_audit_log(session, actor="public", action="create_participant", meta={"participant_id": participant.id})
    await session.commit()
    return participant


@router.patch("/{participant_id}", response_model=ParticipantRead)
async def update_participant(
    participant_id: int, payload: ParticipantUpdate, session: AsyncSession = Depends(get_session)
) -> Participant:
    try:
        participant = await services.update_participant(
            session, participant_id, **payload.model_dump(exclude_unset=True)
        )
    except services.ParticipantNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    await write_audit_log(
        session,
        actor="public",
        action="update_participant",
        meta={"participant_id": participant_id, "fields": sorted(payload.model_dump(exclude_unset=True))},
    )
    await session.commit()
    return participant


@router.delete("/{participant_id}")
async def delete_participant(participant_id: int, session: AsyncSession = Depends(get_session)) -> dict[str, bool]:
    try:
        await services.delete_participant(session, participant_id)
    except services.ParticipantNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    await write_audit_log(session, actor="public", action="delete_participant", meta={"participant_id": participant_id})
    await session.commit()
    return {"success": True}
