from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.controllers.otp_controller import send_otp, verify_otp
from app.core.config import settings
from app.core.database import get_db
from app.core.email_service import ResendMailer, get_mailer
from app.schemas.otp import SendOtpRequest, SendOtpResponse, VerifyOtpRequest, VerifyOtpResponse
from app.services.otp_service import OtpService
from app.services.rate_limit_service import VerificationLimiter

router = APIRouter(prefix="/otp", tags=["OTP"])


def get_otp_service(
    db: AsyncSession = Depends(get_db),
    mailer: ResendMailer = Depends(get_mailer),
) -> OtpService:
    limiter = VerificationLimiter(
        db,
        max_attempts=settings.OTP_MAX_FAILED_ATTEMPTS,
        lockout=timedelta(minutes=settings.OTP_LOCKOUT_MINUTES),
    )
    return OtpService(db, mailer, limiter)


@router.post(
    "/send",
    response_model=SendOtpResponse,
    summary="Send OTP",
    description="Supersedes any unused code for the email, issues a new 6-digit code valid for 5 minutes and emails it.",
)
async def send(payload: SendOtpRequest, service: OtpService = Depends(get_otp_service)) -> SendOtpResponse:
    return await send_otp(service, payload)


@router.post(
    "/verify",
    response_model=VerifyOtpResponse,
    summary="Verify OTP",
    description="""
Consumes the newest live code for the email.

- `type=login` (default): returns the voter identity and a voter Bearer token.
- `type=registration`: only confirms the code; the voter may not exist yet.
    """,
)
async def verify(payload: VerifyOtpRequest, service: OtpService = Depends(get_otp_service)) -> VerifyOtpResponse:
    return await verify_otp(service, payload)
