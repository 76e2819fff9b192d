from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidTransition, NotFound, ValidationError
from app.models.aspirant import ApplicationStatus, AspirantApplication, AspirantPosition
from app.models.audit_log import AuditLog
from app.schemas.application import ApplicationDraft, StatusUpdateIn
from app.services.eligibility import CandidateProfile, PositionRules, check_eligibility

logger = logging.getLogger(__name__)


# ── Status machine ────────────────────────────────────────────────────

TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset({ApplicationStatus.SUBMITTED}),
    ApplicationStatus.SUBMITTED: frozenset({ApplicationStatus.UNDER_REVIEW}),
    ApplicationStatus.UNDER_REVIEW: frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}),
    ApplicationStatus.APPROVED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in TRANSITIONS[current]


def transition(current: ApplicationStatus | str, target: ApplicationStatus | str, force: bool = False) -> ApplicationStatus:
    current = ApplicationStatus(current)
    target = ApplicationStatus(target)
    if force or can_transition(current, target):
        return target
    raise InvalidTransition(f"Cannot move application from {current.value} to {target.value}")


# ── Drafts ────────────────────────────────────────────────────────────

def apply_step(draft: ApplicationDraft, step) -> ApplicationDraft:
    errors = step.problems()
    if errors:
        raise ValidationError(errors=errors, step=step.step)
    return draft.merged(step)


def build_draft(steps: Iterable) -> ApplicationDraft:
    draft = ApplicationDraft()
    for step in steps:
        draft = apply_step(draft, step)
    return draft


def profile_from_draft(draft: ApplicationDraft) -> CandidateProfile:
    personal = draft.personal
    return CandidateProfile(
        department=personal.department.value if personal and personal.department else None,
        level=personal.level.value if personal and personal.level else None,
        gender=personal.gender.value if personal and personal.gender else None,
        cgpa=draft.academic.cgpa if draft.academic else None,
    )


async def get_position(db: AsyncSession, position_id: str) -> AspirantPosition:
    res = await db.execute(select(AspirantPosition).where(AspirantPosition.id == position_id))
    position = res.scalar_one_or_none()
    if not position:
        raise NotFound("Position not found")
    return position


async def submit_application(db: AsyncSession, user_id: str | None, steps: Iterable) -> AspirantApplication:
    draft = build_draft(steps)
    if not draft.is_complete:
        raise ValidationError(
            f"Application is incomplete: missing {', '.join(draft.missing_steps)}",
            missing_steps=draft.missing_steps,
        )

    position = await get_position(db, draft.position.position_id)
    if not position.is_active:
        raise ValidationError("This position is not accepting applications")

    violations = check_eligibility(profile_from_draft(draft), PositionRules.from_position(position))
    if violations:
        raise ValidationError("You are not eligible for this position", errors=violations)

    personal = draft.personal
    now = datetime.now(timezone.utc)
    application = AspirantApplication(
        user_id=user_id,
        full_name=personal.full_name.strip(),
        matric=personal.matric.strip(),
        department=personal.department.value,
        level=personal.level.value,
        gender=personal.gender.value,
        date_of_birth=personal.date_of_birth,
        phone=personal.phone.strip(),
        photo_url=personal.photo_url,
        position_id=position.id,
        why_running=draft.position.why_running.strip(),
        cgpa=draft.academic.cgpa,
        leadership_history=draft.leadership.leadership_history.strip(),
        referee_declaration_accepted=draft.referee.referee_declaration_accepted,
        payment_proof_url=draft.payment.payment_proof_url,
        status=transition(ApplicationStatus.PENDING, ApplicationStatus.SUBMITTED).value,
        submitted_at=now,
        updated_at=now,
    )
    db.add(application)
    await db.flush()

    logger.info("Application %s submitted for position %s", application.id, position.id)
    return application


async def update_status(
    db: AsyncSession,
    application_id: str,
    payload: StatusUpdateIn,
    admin_id: str,
) -> AspirantApplication:
    res = await db.execute(select(AspirantApplication).where(AspirantApplication.id == application_id))
    application = res.scalar_one_or_none()
    if not application:
        raise NotFound("Application not found")

    previous = ApplicationStatus(application.status)
    forced = payload.force and not can_transition(previous, payload.status)
    application.status = transition(previous, payload.status, force=payload.force).value
    if payload.admin_notes is not None:
        application.admin_notes = payload.admin_notes
    application.updated_at = datetime.now(timezone.utc)

    if forced:
        db.add(AuditLog(
            user_id=admin_id,
            user_type="admin",
            action="application_status_forced",
            entity_type="aspirant_application",
            entity_id=application.id,
            details={"from": previous.value, "to": payload.status.value},
        ))
        logger.warning(
            "Forced status change on %s: %s -> %s", application.id, previous.value, payload.status.value
        )

    await db.flush()
    return application
