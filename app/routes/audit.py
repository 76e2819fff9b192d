from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import Principal, get_current_principal
from app.schemas.audit import AuditLogIn, AuditLogOut
from app.services.audit_service import record_audit

router = APIRouter(tags=["Audit"])


@router.post(
    "/audit-log",
    response_model=AuditLogOut,
    summary="Record an audit event",
    description="Requires a Bearer token. The row is always written for the token's user, never a body-supplied id.",
)
async def audit_log(
    payload: AuditLogIn,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> AuditLogOut:
    client_ip = request.client.host if request.client else None
    await record_audit(db, principal, payload, client_ip=client_ip)
    return AuditLogOut()
