from __future__ import annotations

import logging
import secrets
from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.email_service import mask_email
from app.core.errors import Conflict, NotFound
from app.models.voter import StudentRecord, VoterProfile
from app.schemas.voter import StudentRecordIn, VoterRegisterIn

logger = logging.getLogger(__name__)


def new_issuance_token() -> str:
    return secrets.token_urlsafe(32)


async def register_voter(db: AsyncSession, payload: VoterRegisterIn) -> VoterProfile:
    matric = payload.matric.strip().upper()
    email = str(payload.email).strip().lower()

    q = await db.execute(select(StudentRecord).where(StudentRecord.matric == matric))
    if q.scalar_one_or_none() is None:
        raise NotFound("Matric not found in the student list")

    q = await db.execute(
        select(VoterProfile).where(or_(VoterProfile.matric == matric, VoterProfile.email == email))
    )
    if q.scalars().first() is not None:
        raise Conflict("This matric number or email is already registered")

    voter = VoterProfile(
        matric=matric,
        name=payload.name.strip(),
        email=email,
        verified=False,
        voted=False,
        issuance_token=new_issuance_token(),
    )
    db.add(voter)
    await db.flush()

    logger.info("Voter registered: %s", mask_email(email))
    return voter


async def import_students(db: AsyncSession, records: Iterable[StudentRecordIn]) -> tuple[int, int]:
    """Adds unknown matric numbers to the student list. Returns (created, skipped)."""
    records = list(records)
    matrics = {r.matric.strip().upper() for r in records}

    q = await db.execute(select(StudentRecord.matric).where(StudentRecord.matric.in_(matrics)))
    existing = set(q.scalars().all())

    created = skipped = 0
    for r in records:
        matric = r.matric.strip().upper()
        if matric in existing:
            skipped += 1
            continue
        db.add(StudentRecord(
            matric=matric,
            name=r.name.strip(),
            department=r.department.value,
            level=r.level.value if r.level else None,
        ))
        existing.add(matric)
        created += 1

    await db.flush()
    return created, skipped
