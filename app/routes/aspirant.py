from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import Principal, get_current_principal
from app.core.errors import ValidationError
from app.core.upload_storage import UploadKind, UploadStore, get_upload_store, read_upload
from app.models.aspirant import AspirantPosition
from app.schemas.application import (
    ApplicationOut,
    ApplicationSubmitIn,
    AspirantPositionOut,
    EligibilityIn,
    EligibilityOut,
)
from app.schemas.upload import UploadOut
from app.services.application_service import get_position, submit_application
from app.services.eligibility import CandidateProfile, PositionRules, check_eligibility

router = APIRouter(prefix="/aspirant", tags=["Aspirant"])


@router.get("/positions", response_model=List[AspirantPositionOut])
async def list_positions(db: AsyncSession = Depends(get_db)):
    res = await db.execute(
        select(AspirantPosition)
        .where(AspirantPosition.is_active.is_(True))
        .order_by(AspirantPosition.display_order.asc(), AspirantPosition.position_name.asc())
    )
    return list(res.scalars().all())


@router.post("/positions/{position_id}/eligibility", response_model=EligibilityOut)
async def position_eligibility(
    position_id: str,
    payload: EligibilityIn,
    db: AsyncSession = Depends(get_db),
):
    position = await get_position(db, position_id)
    violations = check_eligibility(
        CandidateProfile(
            department=payload.department,
            level=payload.level,
            gender=payload.gender,
            cgpa=payload.cgpa,
        ),
        PositionRules.from_position(position),
    )
    return EligibilityOut(eligible=not violations, violations=violations)


@router.post("/applications", response_model=ApplicationOut, status_code=201)
async def create_application(
    payload: ApplicationSubmitIn,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return await submit_application(db, principal.user_id, payload.steps)


@router.post("/uploads/{kind}", response_model=UploadOut)
async def upload_document(
    kind: UploadKind,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    store: UploadStore = Depends(get_upload_store),
):
    data = await read_upload(kind, file)
    if not data:
        raise ValidationError("File is empty")

    content_type = file.content_type or "application/octet-stream"
    url = await store.save(kind, data, content_type, file.filename or "upload", principal.user_id)
    return UploadOut(url=url, kind=kind.value, content_type=content_type, size=len(data))
