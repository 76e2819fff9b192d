from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {"email": "electoral@cohssa.org", "password": "ChangeMe@2026"}
        }
    }


class AdminInfo(BaseModel):
    """Committee member as the dashboard sees them. No password material."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class MeResponse(AdminInfo):
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    admin: AdminInfo
