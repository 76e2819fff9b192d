"""
One-time passcode lifecycle: issue, supersede, verify.

Issuing a code marks every earlier unused code for the same email as used
before inserting the new one, so right after ``issue`` returns there is at
most one live code per email. Verification claims a code with a single
conditional UPDATE ... RETURNING; two concurrent attempts with the same
code cannot both succeed.
"""
from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.email_service import ResendMailer, mask_email, render_otp_email
from app.core.errors import (
    IdentityNotFound,
    InvalidOrExpiredCode,
    PersistenceError,
    ValidationError,
)
from app.models.otp_code import OtpCode, OtpPurpose
from app.models.voter import VoterProfile
from app.schemas.otp import VerifyFlow, VoterIdentity
from app.services.rate_limit_service import VerificationLimiter

logger = logging.getLogger(__name__)

OTP_TTL = timedelta(minutes=5)
CODE_RE = re.compile(r"^\d{6}$")


def generate_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class IssuedCode:
    id: str
    email: str
    purpose: OtpPurpose
    expires_at: datetime


class OtpService:
    def __init__(
        self,
        db: AsyncSession,
        mailer: ResendMailer,
        limiter: VerificationLimiter | None = None,
    ) -> None:
        self.db = db
        self.mailer = mailer
        self.limiter = limiter or VerificationLimiter(db)

    # ── Issuance ──────────────────────────────────────────────────────
    async def issue(self, email: str, purpose: OtpPurpose | str = OtpPurpose.LOGIN) -> IssuedCode:
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")
        try:
            purpose = OtpPurpose(purpose)
        except ValueError:
            raise ValidationError("Invalid OTP type") from None

        # before any write: no key means nothing gets superseded
        self.mailer.ensure_configured()

        now = datetime.now(timezone.utc)
        expires_at = now + OTP_TTL

        try:
            await self.db.execute(
                update(OtpCode)
                .where(OtpCode.email == email)
                .where(OtpCode.used.is_(False))
                .values(used=True)
                .execution_options(synchronize_session=False)
            )

            code = generate_code()
            row = OtpCode(
                email=email,
                code=code,
                purpose=purpose.value,
                used=False,
                created_at=now,
                expires_at=expires_at,
            )
            self.db.add(row)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("OTP insert failed for %s: %r", mask_email(email), exc)
            raise PersistenceError("Failed to generate OTP") from exc

        # a DeliveryError here leaves the committed code valid
        subject, html = render_otp_email(code, purpose.value, int(OTP_TTL.total_seconds() // 60))
        await self.mailer.send(email, subject, html)

        logger.info("OTP issued for %s (%s)", mask_email(email), purpose.value)
        return IssuedCode(id=row.id, email=email, purpose=purpose, expires_at=expires_at)

    # ── Verification ──────────────────────────────────────────────────
    async def _claim(self, email: str, code: str) -> OtpCode | None:
        now = datetime.now(timezone.utc)
        candidate = aliased(OtpCode)

        newest = (
            select(candidate.id)
            .where(candidate.email == email)
            .where(candidate.code == code)
            .where(candidate.used.is_(False))
            .where(candidate.expires_at > now)
            .order_by(candidate.created_at.desc())
            .limit(1)
            .scalar_subquery()
        )

        result = await self.db.execute(
            update(OtpCode)
            .where(OtpCode.id == newest)
            .where(OtpCode.used.is_(False))
            .values(used=True)
            .returning(OtpCode)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def verify(
        self,
        email: str,
        code: str,
        flow: VerifyFlow | str = VerifyFlow.LOGIN,
    ) -> VoterIdentity | None:
        email = normalize_email(email)
        code = (code or "").strip()
        if not email or not code:
            raise ValidationError("Email and code are required")
        if not CODE_RE.match(code):
            raise ValidationError("Invalid code format")
        try:
            flow = VerifyFlow(flow)
        except ValueError:
            raise ValidationError("Invalid verification type") from None

        try:
            await self.limiter.check(email)

            claimed = await self._claim(email, code)
            if claimed is None:
                await self.limiter.record_failure(email)
            else:
                await self.limiter.clear(email)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("OTP verification failed for %s: %r", mask_email(email), exc)
            raise PersistenceError("Failed to verify OTP") from exc

        if claimed is None:
            raise InvalidOrExpiredCode()
        logger.info("OTP verified for %s (%s)", mask_email(email), flow.value)

        if flow is VerifyFlow.REGISTRATION:
            return None

        try:
            q = await self.db.execute(select(VoterProfile).where(VoterProfile.email == email))
            voter = q.scalar_one_or_none()
            if voter is not None and not voter.verified:
                voter.verified = True
                await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Voter lookup failed for %s: %r", mask_email(email), exc)
            raise PersistenceError("Failed to verify OTP") from exc

        if voter is None:
            raise IdentityNotFound()

        return VoterIdentity(
            id=voter.id,
            matric=voter.matric,
            name=voter.name,
            email=voter.email,
            verified=voter.verified,
            has_voted=voter.voted,
            issuance_token=voter.issuance_token,
            user_id=voter.user_id,
        )
