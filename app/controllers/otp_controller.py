from app.core.config import settings
from app.core.security import Role, create_access_token
from app.schemas.otp import (
    SendOtpRequest,
    SendOtpResponse,
    VerifyFlow,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from app.services.otp_service import OtpService


async def send_otp(service: OtpService, payload: SendOtpRequest) -> SendOtpResponse:
    issued = await service.issue(payload.email, payload.type)
    return SendOtpResponse(expires_at=issued.expires_at)


async def verify_otp(service: OtpService, payload: VerifyOtpRequest) -> VerifyOtpResponse:
    voter = await service.verify(payload.email, payload.code, payload.type)

    if payload.type is VerifyFlow.REGISTRATION:
        return VerifyOtpResponse(type=VerifyFlow.REGISTRATION)

    token = create_access_token(
        voter.id,
        voter.email,
        role=Role.VOTER,
        expires_minutes=settings.VOTER_TOKEN_EXPIRE_MINUTES,
    )
    return VerifyOtpResponse(voter=voter, access_token=token)
