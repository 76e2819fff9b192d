import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class VoteType(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class VotingPosition(Base):
    __tablename__ = "voting_positions"

    id = Column(String(36), primary_key=True, default=_uuid)
    position_name = Column(String(150), nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    vote_type = Column(String(10), nullable=False, default=VoteType.SINGLE.value)
    max_selections = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=_now)

    candidates = relationship("Candidate", back_populates="voting_position")


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(150), nullable=False)
    matric = Column(String(30), nullable=False)
    department = Column(String(80), nullable=False)
    photo_url = Column(Text, nullable=True)
    manifesto = Column(Text, nullable=True)

    voting_position_id = Column(String(36), ForeignKey("voting_positions.id", ondelete="CASCADE"), index=True)
    application_id = Column(String(36), ForeignKey("aspirant_applications.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_now)

    voting_position = relationship("VotingPosition", back_populates="candidates")


class Vote(Base):
    """Anonymous ballot line, keyed by the voter's issuance token."""
    __tablename__ = "votes"

    id = Column(String(36), primary_key=True, default=_uuid)
    issuance_token = Column(String(64), nullable=False, index=True)
    candidate_id = Column(String(36), ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    voting_position_id = Column(String(36), ForeignKey("voting_positions.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_now)

    __table_args__ = (
        UniqueConstraint("issuance_token", "candidate_id", name="uq_vote_token_candidate"),
    )
