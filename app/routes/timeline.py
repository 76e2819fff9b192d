from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.timeline import TimelineStageOut
from app.services.timeline_service import list_stages, to_out

router = APIRouter(tags=["Timeline"])


@router.get("/timeline", response_model=List[TimelineStageOut])
async def public_timeline(db: AsyncSession = Depends(get_db)):
    """Stages the committee has made publicly visible, earliest first."""
    return [to_out(s) for s in await list_stages(db, public_only=True)]
