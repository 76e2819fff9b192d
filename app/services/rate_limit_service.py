"""
Failed-verification lockout.

Each email gets one ``rate_limits`` row per action. Failures increment the
counter; reaching the limit locks the email for a fixed window. A success
deletes the row. When a lock runs out the counter starts again from zero.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.email_service import mask_email
from app.core.errors import TooManyAttempts
from app.models.rate_limit import RateLimit

logger = logging.getLogger(__name__)

VERIFY_OTP_ACTION = "verify_otp"


def _as_aware_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class VerificationLimiter:
    def __init__(
        self,
        db: AsyncSession,
        max_attempts: int = 5,
        lockout: timedelta = timedelta(minutes=15),
        action_type: str = VERIFY_OTP_ACTION,
    ) -> None:
        self.db = db
        self.max_attempts = max_attempts
        self.lockout = lockout
        self.action_type = action_type

    async def _get(self, identifier: str) -> RateLimit | None:
        q = await self.db.execute(
            select(RateLimit)
            .where(RateLimit.identifier == identifier)
            .where(RateLimit.action_type == self.action_type)
        )
        return q.scalar_one_or_none()

    async def check(self, identifier: str) -> None:
        """Raises TooManyAttempts while the identifier is locked out."""
        row = await self._get(identifier)
        if row is None:
            return

        now = datetime.now(timezone.utc)
        locked_until = _as_aware_utc(row.locked_until)

        if locked_until and locked_until > now:
            remaining = math.ceil((locked_until - now).total_seconds() / 60)
            raise TooManyAttempts(
                f"Account locked. Please try again in {remaining} minute(s)."
            )

        if locked_until and locked_until <= now:
            row.attempt_count = 0
            row.locked_until = None
            await self.db.commit()
            return

        if row.attempt_count >= self.max_attempts:
            row.locked_until = now + self.lockout
            await self.db.commit()
            logger.warning("Verification locked for %s", mask_email(identifier))
            raise TooManyAttempts(
                f"Too many failed attempts. Account locked for {int(self.lockout.total_seconds() // 60)} minutes."
            )

    async def record_failure(self, identifier: str) -> int:
        now = datetime.now(timezone.utc)
        row = await self._get(identifier)

        if row is None:
            row = RateLimit(
                identifier=identifier,
                action_type=self.action_type,
                attempt_count=1,
                first_attempt_at=now,
                last_attempt_at=now,
            )
            self.db.add(row)
        else:
            row.attempt_count += 1
            row.last_attempt_at = now

        await self.db.flush()
        return row.attempt_count

    async def clear(self, identifier: str) -> None:
        await self.db.execute(
            delete(RateLimit)
            .where(RateLimit.identifier == identifier)
            .where(RateLimit.action_type == self.action_type)
        )
