import pytest
import pytest_asyncio
from pydantic import TypeAdapter
from sqlalchemy import select

from app.core.errors import InvalidTransition, ValidationError
from app.models.aspirant import ApplicationStatus, AspirantPosition
from app.models.audit_log import AuditLog
from app.schemas.application import (
    AcademicStep,
    ApplicationDraft,
    ApplicationStep,
    PersonalInfoStep,
    PositionStep,
)
from app.services.application_service import apply_step, build_draft, transition

from tests.conftest import bearer

STATEMENT = " ".join(["leadership"] * 60)


def personal(**overrides):
    data = {
        "step": "personal",
        "full_name": "Aisha Bello",
        "matric": "21/08nus014",
        "department": "Nursing Sciences",
        "level": "300L",
        "date_of_birth": "2002-04-01",
        "gender": "female",
        "phone": "08012345678",
        "photo_url": "https://files.test/photo.jpg",
    }
    data.update(overrides)
    return data


def all_steps(position_id, cgpa=3.8):
    return [
        personal(),
        {"step": "position", "position_id": position_id, "why_running": STATEMENT},
        {"step": "academic", "cgpa": cgpa},
        {"step": "leadership", "leadership_history": "Class representative for two sessions and NUNSA PRO."},
        {"step": "referee", "referee_declaration_accepted": True},
        {"step": "payment", "payment_proof_url": "https://files.test/receipt.pdf"},
    ]


@pytest_asyncio.fixture
async def position(session_factory):
    async with session_factory() as s:
        p = AspirantPosition(
            position_name="Welfare Director",
            fee=5000,
            min_cgpa=3.0,
            eligible_departments=["Nursing Sciences", "Medicine and Surgery"],
            eligible_levels=["300L", "400L"],
            eligible_gender="female",
        )
        s.add(p)
        await s.commit()
        return p


# ── Steps and drafts ──────────────────────────────────────────────────

def test_personal_step_problems():
    step = PersonalInfoStep(full_name=" ", matric="2108nus014", phone="12345")

    assert step.problems() == [
        "Full name is required",
        "Invalid matric number format. Use: XX/XXaaa000 (e.g., 21/08nus014)",
        "Department is required",
        "Level is required",
        "Date of birth is required",
        "Gender is required",
        "Invalid phone number (must be 11 digits starting with 07, 08, or 09)",
        "Profile photo is required",
    ]


def test_statement_word_limits():
    assert PositionStep(position_id="p", why_running="too short").problems() == [
        "Your statement must be at least 50 words",
    ]
    assert PositionStep(position_id="p", why_running=" ".join(["x"] * 201)).problems() == [
        "Your statement must not exceed 200 words",
    ]


@pytest.mark.parametrize("cgpa", [1.99, 5.01])
def test_cgpa_bounds(cgpa):
    assert AcademicStep(cgpa=cgpa).problems() == ["CGPA must be between 2.00 and 5.00"]


def test_steps_parse_by_tag():
    step = TypeAdapter(ApplicationStep).validate_python({"step": "academic", "cgpa": 3.2})
    assert isinstance(step, AcademicStep)


def test_draft_is_not_mutated_by_merge():
    draft = ApplicationDraft()
    merged = apply_step(draft, AcademicStep(cgpa=4.0))

    assert draft.academic is None
    assert merged.academic.cgpa == 4.0
    assert merged.missing_steps == ["personal", "position", "leadership", "referee", "payment"]


def test_invalid_step_is_not_merged():
    with pytest.raises(ValidationError) as exc:
        apply_step(ApplicationDraft(), AcademicStep())
    assert exc.value.message == "CGPA is required"
    assert exc.value.extra["step"] == "academic"


def test_complete_draft():
    adapter = TypeAdapter(ApplicationStep)
    draft = build_draft(adapter.validate_python(s) for s in all_steps("pos-1"))
    assert draft.is_complete


# ── Status machine ────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "submitted"),
        ("submitted", "under_review"),
        ("under_review", "approved"),
        ("under_review", "rejected"),
    ],
)
def test_allowed_transitions(current, target):
    assert transition(current, target) == ApplicationStatus(target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "approved"),
        ("submitted", "approved"),
        ("approved", "rejected"),
        ("rejected", "submitted"),
        ("under_review", "pending"),
    ],
)
def test_refused_transitions(current, target):
    with pytest.raises(InvalidTransition):
        transition(current, target)


def test_forced_transition():
    assert transition("approved", "under_review", force=True) == ApplicationStatus.UNDER_REVIEW


# ── Routes ────────────────────────────────────────────────────────────

async def test_list_positions(client, position):
    r = await client.get("/api/aspirant/positions")

    assert r.status_code == 200
    [row] = r.json()
    assert row["position_name"] == "Welfare Director"
    assert row["eligible_levels"] == ["300L", "400L"]


async def test_position_eligibility(client, position):
    r = await client.post(
        f"/api/aspirant/positions/{position.id}/eligibility",
        json={"department": "Human Anatomy", "level": "300L", "gender": "female", "cgpa": 3.5},
    )

    assert r.status_code == 200
    assert r.json() == {
        "eligible": False,
        "violations": ["Your department (Human Anatomy) is not eligible for this position"],
    }


async def test_eligibility_unknown_position(client):
    r = await client.post("/api/aspirant/positions/nope/eligibility", json={})
    assert r.status_code == 404
    assert r.json()["error"] == "Position not found"


async def test_submit_application(client, position, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/applications",
        json={"steps": all_steps(position.id)},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "submitted"
    assert body["position_id"] == position.id
    assert body["submitted_at"] is not None


async def test_submit_requires_token(client, position):
    r = await client.post("/api/aspirant/applications", json={"steps": all_steps(position.id)})
    assert r.status_code == 401


async def test_submit_incomplete(client, position, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/applications",
        json={"steps": [personal()]},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 400
    assert r.json()["missing_steps"] == ["position", "academic", "leadership", "referee", "payment"]


async def test_submit_invalid_step(client, position, make_voter, voter_token):
    voter = await make_voter()
    steps = all_steps(position.id)
    steps[0] = personal(phone="0801")

    r = await client.post("/api/aspirant/applications", json={"steps": steps}, headers=bearer(voter_token(voter)))

    assert r.status_code == 400
    body = r.json()
    assert body["step"] == "personal"
    assert body["errors"] == ["Invalid phone number (must be 11 digits starting with 07, 08, or 09)"]


async def test_submit_ineligible(client, position, make_voter, voter_token):
    voter = await make_voter()

    r = await client.post(
        "/api/aspirant/applications",
        json={"steps": all_steps(position.id, cgpa=2.5)},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "You are not eligible for this position"
    assert body["errors"] == ["Minimum CGPA required: 3 (Your CGPA: 2.5)"]


async def test_review_flow(client, session_factory, position, make_voter, voter_token, make_admin, admin_token):
    voter = await make_voter()
    admin = await make_admin()
    headers = bearer(admin_token(admin))

    r = await client.post(
        "/api/aspirant/applications",
        json={"steps": all_steps(position.id)},
        headers=bearer(voter_token(voter)),
    )
    app_id = r.json()["id"]
    url = f"/api/admin/applications/{app_id}/status"

    r = await client.patch(url, json={"status": "approved"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["code"] == "INVALID_TRANSITION"

    r = await client.patch(url, json={"status": "under_review"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "under_review"

    r = await client.patch(url, json={"status": "approved", "admin_notes": "Cleared"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["admin_notes"] == "Cleared"

    async with session_factory() as s:
        assert (await s.execute(select(AuditLog))).scalars().all() == []

    r = await client.patch(url, json={"status": "under_review", "force": True}, headers=headers)
    assert r.status_code == 200

    async with session_factory() as s:
        row = (await s.execute(select(AuditLog))).scalar_one()
    assert row.action == "application_status_forced"
    assert row.entity_id == app_id
    assert row.user_id == str(admin.id)
    assert row.details == {"from": "approved", "to": "under_review"}


async def test_status_update_requires_admin(client, make_voter, voter_token):
    voter = await make_voter()

    r = await client.patch(
        "/api/admin/applications/whatever/status",
        json={"status": "approved"},
        headers=bearer(voter_token(voter)),
    )

    assert r.status_code == 403
    assert r.json()["error"] == "Not authorized as admin"
