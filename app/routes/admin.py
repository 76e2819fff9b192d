from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.core.errors import NotFound
from app.models.admin import Admin
from app.models.aspirant import AspirantPosition
from app.models.voting import Candidate, VoteType, VotingPosition
from app.schemas.application import (
    ApplicationOut,
    AspirantPositionIn,
    AspirantPositionOut,
    StatusUpdateIn,
)
from app.schemas.timeline import TimelineStageIn, TimelineStageOut, TimelineStageUpdate
from app.schemas.voter import StudentImportIn, StudentImportOut
from app.schemas.voting import CandidateIn, CandidateOut, VotingPositionIn, VotingPositionOut
from app.services import timeline_service
from app.services.application_service import update_status
from app.services.voter_service import import_students

router = APIRouter(prefix="/admin", tags=["Admin"])


# =========================================================
# ---------------------- STUDENTS --------------------------
# =========================================================

@router.post("/students", response_model=StudentImportOut)
async def admin_import_students(
    payload: StudentImportIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    created, skipped = await import_students(db, payload.students)
    return StudentImportOut(created=created, skipped=skipped)


# =========================================================
# ---------------------- ASPIRANTS -------------------------
# =========================================================

@router.post("/aspirant-positions", response_model=AspirantPositionOut, status_code=201)
async def admin_create_aspirant_position(
    payload: AspirantPositionIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    position = AspirantPosition(
        position_name=payload.position_name.strip(),
        description=payload.description,
        fee=payload.fee,
        min_cgpa=payload.min_cgpa,
        eligible_departments=[d.value for d in payload.eligible_departments],
        eligible_levels=[lv.value for lv in payload.eligible_levels],
        eligible_gender=payload.eligible_gender.value if payload.eligible_gender else None,
        display_order=payload.display_order,
        is_active=True,
    )
    db.add(position)
    await db.flush()
    return position


@router.patch("/applications/{application_id}/status", response_model=ApplicationOut)
async def admin_update_application_status(
    application_id: str,
    payload: StatusUpdateIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    return await update_status(db, application_id, payload, admin_id=str(admin.id))


# =========================================================
# ---------------------- VOTING ----------------------------
# =========================================================

@router.post("/voting-positions", response_model=VotingPositionOut, status_code=201)
async def admin_create_voting_position(
    payload: VotingPositionIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    position = VotingPosition(
        position_name=payload.position_name.strip(),
        display_order=payload.display_order,
        vote_type=payload.vote_type.value,
        max_selections=1 if payload.vote_type is VoteType.SINGLE else payload.max_selections,
        is_active=True,
    )
    db.add(position)
    await db.flush()
    return position


@router.post("/candidates", response_model=CandidateOut, status_code=201)
async def admin_create_candidate(
    payload: CandidateIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    res = await db.execute(select(VotingPosition).where(VotingPosition.id == payload.voting_position_id))
    if res.scalar_one_or_none() is None:
        raise NotFound("Voting position not found")

    candidate = Candidate(
        name=payload.name.strip(),
        matric=payload.matric.strip(),
        department=payload.department,
        voting_position_id=payload.voting_position_id,
        photo_url=payload.photo_url,
        manifesto=payload.manifesto,
        application_id=payload.application_id,
    )
    db.add(candidate)
    await db.flush()
    return candidate


# =========================================================
# ---------------------- TIMELINE --------------------------
# =========================================================

@router.get("/timeline", response_model=List[TimelineStageOut])
async def admin_list_timeline(
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    return [timeline_service.to_out(s) for s in await timeline_service.list_stages(db)]


@router.post("/timeline", response_model=TimelineStageOut, status_code=201)
async def admin_create_timeline_stage(
    payload: TimelineStageIn,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    stage = await timeline_service.create_stage(db, payload, admin_id=str(admin.id))
    return timeline_service.to_out(stage)


@router.patch("/timeline/{stage_id}", response_model=TimelineStageOut)
async def admin_update_timeline_stage(
    stage_id: str,
    payload: TimelineStageUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    stage = await timeline_service.update_stage(db, stage_id, payload, admin_id=str(admin.id))
    return timeline_service.to_out(stage)


@router.delete("/timeline/{stage_id}", status_code=204)
async def admin_delete_timeline_stage(
    stage_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
):
    await timeline_service.delete_stage(db, stage_id, admin_id=str(admin.id))
