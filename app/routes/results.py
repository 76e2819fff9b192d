from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import Principal, get_current_voter, get_optional_principal
from app.core.security import Role
from app.models.voter import VoterProfile
from app.schemas.results import BallotIn, BallotOut, ResultsOut
from app.services.results_service import ResultsTally, build_results, cast_ballot
from app.services.timeline_service import require_results_open, require_voting_open

router = APIRouter(tags=["Results"])


def get_results_tally(request: Request) -> ResultsTally:
    return request.app.state.results_tally


@router.get("/results", response_model=ResultsOut)
async def results(
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
    tally: ResultsTally = Depends(get_results_tally),
):
    # the committee watches results live; everyone else waits for the results stage
    if principal is None or principal.role is not Role.ADMIN:
        await require_results_open(db)
    return await build_results(db, tally)


@router.post("/votes", response_model=BallotOut, status_code=201)
async def vote(
    payload: BallotIn,
    voter: VoterProfile = Depends(get_current_voter),
    db: AsyncSession = Depends(get_db),
    tally: ResultsTally = Depends(get_results_tally),
):
    await require_voting_open(db)
    recorded = await cast_ballot(db, voter, payload.selections, tally)
    return BallotOut(votes_recorded=recorded)
