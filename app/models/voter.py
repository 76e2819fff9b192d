from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class StudentRecord(Base):
    """Official student list. Only matric numbers in here may register to vote."""
    __tablename__ = "student_list"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    matric: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    department: Mapped[str] = mapped_column(String(80), nullable=False)
    level: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class VoterProfile(Base):
    __tablename__ = "voter_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    matric: Mapped[str] = mapped_column(String(30), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    voted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    voted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # ballot token; votes reference this, never the voter id
    issuance_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<VoterProfile id={self.id} matric={self.matric!r} verified={self.verified}>"
