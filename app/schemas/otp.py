from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.otp_code import OtpPurpose


class VerifyFlow(str, Enum):
    LOGIN = "login"                # voter must already exist
    REGISTRATION = "registration"  # voter profile may not exist yet


# ── Request Bodies ────────────────────────────────────────────────────
# Presence is checked by the service so missing fields get the
# "Email is required" style message instead of a schema error.
class SendOtpRequest(BaseModel):
    email: str = ""
    type: OtpPurpose = OtpPurpose.LOGIN

    model_config = {
        "json_schema_extra": {
            "example": {"email": "voter@example.com", "type": "login"}
        }
    }


class VerifyOtpRequest(BaseModel):
    email: str = ""
    code: str = ""
    type: VerifyFlow = VerifyFlow.LOGIN


# ── Response Bodies ───────────────────────────────────────────────────
class SendOtpResponse(BaseModel):
    success: bool = True
    message: str = "OTP sent successfully"
    expires_at: datetime = Field(serialization_alias="expiresAt")


class VoterIdentity(BaseModel):
    """
    What a successful verification hands back about the voter.
    No password or credential material is ever included here.
    """
    id: str
    matric: str
    name: str
    email: str
    verified: bool
    has_voted: bool
    issuance_token: Optional[str] = None
    user_id: Optional[str] = None


class VerifyOtpResponse(BaseModel):
    valid: bool = True
    message: str = "OTP verified successfully"
    type: VerifyFlow = VerifyFlow.LOGIN
    voter: Optional[VoterIdentity] = None
    access_token: Optional[str] = None
    token_type: str = "bearer"
