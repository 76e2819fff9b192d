"""
Election timeline stages and the gates built on them.

A stage is open when it is active and ``now`` falls inside
[start_time, end_time]. Stages are found by a case-insensitive substring of
their name, so "Voting Day" and "Results" both match their gates.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound, StageClosed, ValidationError
from app.models.audit_log import AuditLog
from app.models.election_timeline import ElectionTimeline
from app.schemas.timeline import TimelineStageIn, TimelineStageOut, TimelineStageUpdate

logger = logging.getLogger(__name__)

VOTING_STAGE = "voting"
RESULTS_STAGE = "results"


def _utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def stage_is_open(stage: ElectionTimeline, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return bool(stage.is_active) and _utc(stage.start_time) <= now <= _utc(stage.end_time)


def to_out(stage: ElectionTimeline, now: Optional[datetime] = None) -> TimelineStageOut:
    out = TimelineStageOut.model_validate(stage)
    out.is_open = stage_is_open(stage, now)
    return out


async def list_stages(db: AsyncSession, public_only: bool = False) -> list[ElectionTimeline]:
    q = select(ElectionTimeline).order_by(ElectionTimeline.start_time.asc())
    if public_only:
        q = q.where(ElectionTimeline.is_publicly_visible.is_(True))
    res = await db.execute(q)
    return list(res.scalars().all())


async def is_stage_open(db: AsyncSession, keyword: str, now: Optional[datetime] = None) -> bool:
    res = await db.execute(
        select(ElectionTimeline).where(ElectionTimeline.stage_name.ilike(f"%{keyword}%"))
    )
    return any(stage_is_open(s, now) for s in res.scalars().all())


async def require_voting_open(db: AsyncSession) -> None:
    if not await is_stage_open(db, VOTING_STAGE):
        raise StageClosed("Voting not open")


async def require_results_open(db: AsyncSession) -> None:
    if not await is_stage_open(db, RESULTS_STAGE):
        raise StageClosed("Results are not available yet")


# ── Admin CRUD ────────────────────────────────────────────────────────

async def _get(db: AsyncSession, stage_id: str) -> ElectionTimeline:
    res = await db.execute(select(ElectionTimeline).where(ElectionTimeline.id == stage_id))
    stage = res.scalar_one_or_none()
    if stage is None:
        raise NotFound("Timeline stage not found")
    return stage


def _audit(db: AsyncSession, admin_id: str, action: str, stage_id: Optional[str], details: dict) -> None:
    db.add(AuditLog(
        user_id=admin_id,
        user_type="admin",
        action=action,
        entity_type="election_timeline",
        entity_id=stage_id,
        details=details,
    ))


async def create_stage(db: AsyncSession, payload: TimelineStageIn, admin_id: str) -> ElectionTimeline:
    stage = ElectionTimeline(
        stage_name=payload.stage_name.strip(),
        start_time=payload.start_time,
        end_time=payload.end_time,
        is_active=payload.is_active,
        is_publicly_visible=payload.is_publicly_visible,
    )
    db.add(stage)
    await db.flush()
    _audit(db, admin_id, "timeline_create", stage.id, {"stage_name": stage.stage_name})
    await db.flush()
    logger.info("Timeline stage %r created", stage.stage_name)
    return stage


async def update_stage(
    db: AsyncSession,
    stage_id: str,
    payload: TimelineStageUpdate,
    admin_id: str,
) -> ElectionTimeline:
    stage = await _get(db, stage_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    start = changes.get("start_time", stage.start_time)
    end = changes.get("end_time", stage.end_time)
    if _utc(end) <= _utc(start):
        raise ValidationError("End time must be after start time")

    for field, value in changes.items():
        setattr(stage, field, value.strip() if field == "stage_name" else value)

    _audit(db, admin_id, "timeline_update", stage.id, {
        k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in changes.items()
    })
    await db.flush()
    return stage


async def delete_stage(db: AsyncSession, stage_id: str, admin_id: str) -> None:
    stage = await _get(db, stage_id)
    _audit(db, admin_id, "timeline_delete", stage.id, {"stage_name": stage.stage_name})
    await db.delete(stage)
    await db.flush()
