from typing import List, Optional

from pydantic import BaseModel, Field


class CandidateResult(BaseModel):
    candidate_id: str
    name: str
    department: str
    photo_url: Optional[str] = None
    votes: int = 0


class PositionResult(BaseModel):
    position_id: str
    position_name: str
    vote_type: str
    total_votes: int = 0
    candidates: List[CandidateResult] = Field(default_factory=list)


class ResultsOut(BaseModel):
    positions: List[PositionResult] = Field(default_factory=list)
    total_voters: int = 0
    voted_count: int = 0
    turnout: float = 0.0


class BallotSelection(BaseModel):
    voting_position_id: str
    candidate_ids: List[str] = Field(default_factory=list)


class BallotIn(BaseModel):
    selections: List[BallotSelection] = Field(..., min_length=1)


class BallotOut(BaseModel):
    success: bool = True
    votes_recorded: int
