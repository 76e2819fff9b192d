import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class OtpPurpose(str, Enum):
    LOGIN = "login"
    VERIFICATION = "verification"


class OtpCode(Base):
    """
    One row per issued code. Rows are never deleted; `used` flips to True
    once, either on successful verification or when a newer code supersedes it.
    """
    __tablename__ = "otp_codes"

    __table_args__ = (
        Index("ix_otp_codes_email_used", "email", "used"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(6), nullable=False)
    purpose: Mapped[str] = mapped_column(String(20), nullable=False, default=OtpPurpose.LOGIN.value)

    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<OtpCode id={self.id} email={self.email!r} used={self.used}>"
