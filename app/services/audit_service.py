from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import Principal
from app.core.errors import PersistenceError, ValidationError
from app.models.audit_log import AuditLog
from app.schemas.audit import AuditLogIn

logger = logging.getLogger(__name__)


async def record_audit(
    db: AsyncSession,
    principal: Principal,
    payload: AuditLogIn,
    client_ip: str | None = None,
) -> AuditLog:
    """Writes one audit row for the verified principal."""
    action = (payload.action or "").strip()
    if not action:
        raise ValidationError("Bad Request: action is required")

    logger.info(
        "Audit log request from verified user %s: %s %s %s",
        principal.user_id, action, payload.entity_type, payload.entity_id,
    )

    row = AuditLog(
        user_id=principal.user_id,
        user_type=principal.role.value,
        action=action[:100],
        entity_type=payload.entity_type,
        entity_id=payload.entity_id,
        details=payload.details,
        ip_address=payload.ip_address or client_ip,
    )
    try:
        db.add(row)
        await db.flush()
    except SQLAlchemyError as exc:
        logger.error("Audit insert failed: %r", exc)
        raise PersistenceError("Failed to write audit log") from exc
    return row
