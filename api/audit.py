from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.audit import recent_audit_logs
from core.models import AuditLog
from core.schemas import AuditLogRead

from .dependencies import get_session, require_admin

router = APIRouter(prefix="/audit", tags=["audit"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[AuditLogRead])
async def list_audit_logs(session: AsyncSession = Depends(get_session)) -> list[AuditLog]:
    return await recent_audit_logs(session)
