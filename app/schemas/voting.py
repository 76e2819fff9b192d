from typing import Optional

from pydantic import BaseModel, Field

from app.models.voting import VoteType


class VotingPositionIn(BaseModel):
    position_name: str = Field(..., min_length=1)
    display_order: int = 0
    vote_type: VoteType = VoteType.SINGLE
    max_selections: int = Field(1, ge=1)


class VotingPositionOut(BaseModel):
    id: str
    position_name: str
    display_order: int
    vote_type: str
    max_selections: int
    is_active: bool

    model_config = {"from_attributes": True}


class CandidateIn(BaseModel):
    name: str = Field(..., min_length=1)
    matric: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    voting_position_id: str
    photo_url: Optional[str] = None
    manifesto: Optional[str] = None
    application_id: Optional[str] = None


class CandidateOut(BaseModel):
    id: str
    name: str
    matric: str
    department: str
    voting_position_id: str
    photo_url: Optional[str] = None
    manifesto: Optional[str] = None

    model_config = {"from_attributes": True}
