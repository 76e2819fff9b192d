from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.voter import VoterOut, VoterRegisterIn
from app.services.voter_service import register_voter

router = APIRouter(prefix="/voters", tags=["Voters"])


@router.post("/register", response_model=VoterOut, status_code=201)
async def register(payload: VoterRegisterIn, db: AsyncSession = Depends(get_db)):
    return await register_voter(db, payload)
