from typing import Any, Optional

from pydantic import BaseModel


class AuditLogIn(BaseModel):
    """
    Body of POST /audit-log. Any user_id the client sends is ignored;
    the row is written for the token's subject.
    """
    action: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None

    model_config = {"extra": "ignore"}


class AuditLogOut(BaseModel):
    success: bool = True
