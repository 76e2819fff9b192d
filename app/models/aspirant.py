from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


# --------------------------------------------------
# ENUMS
# --------------------------------------------------

class Department(str, Enum):
    NURSING = "Nursing Sciences"
    MEDICAL_LAB = "Medical Laboratory Sciences"
    MEDICINE = "Medicine and Surgery"
    PUBLIC_HEALTH = "Community Medicine and Public Health"
    ANATOMY = "Human Anatomy"
    PHYSIOLOGY = "Human Physiology"
    BIOCHEMISTRY = "Medical Biochemistry"


class Level(str, Enum):
    L100 = "100L"
    L200 = "200L"
    L300 = "300L"
    L400 = "400L"
    L500 = "500L"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# --------------------------------------------------
# MODELS
# --------------------------------------------------

class AspirantPosition(Base):
    __tablename__ = "aspirant_positions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    position_name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # --------------------------------------------------
    # ELIGIBILITY
    # --------------------------------------------------

    min_cgpa: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # empty list = no restriction
    eligible_departments: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    eligible_levels: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    eligible_gender: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    applications: Mapped[List["AspirantApplication"]] = relationship(
        "AspirantApplication",
        back_populates="position",
    )


class AspirantApplication(Base):
    __tablename__ = "aspirant_applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    # --------------------------------------------------
    # PERSONAL
    # --------------------------------------------------

    full_name: Mapped[str] = mapped_column(String(150), nullable=False)
    matric: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    department: Mapped[str] = mapped_column(String(80), nullable=False)
    level: Mapped[str] = mapped_column(String(10), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    photo_url: Mapped[str] = mapped_column(Text, nullable=False)

    # --------------------------------------------------
    # POSITION / ACADEMIC / LEADERSHIP
    # --------------------------------------------------

    position_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("aspirant_positions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    why_running: Mapped[str] = mapped_column(Text, nullable=False)
    cgpa: Mapped[float] = mapped_column(Float, nullable=False)
    leadership_history: Mapped[str] = mapped_column(Text, nullable=False)

    referee_declaration_accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_proof_url: Mapped[str] = mapped_column(Text, nullable=False)
    payment_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # --------------------------------------------------
    # REVIEW
    # --------------------------------------------------

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApplicationStatus.PENDING.value,
        index=True,
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    position: Mapped["AspirantPosition"] = relationship(
        "AspirantPosition",
        back_populates="applications",
        lazy="joined",
    )
