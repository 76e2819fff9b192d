from sqlalchemy import select

from app.core.security import create_access_token
from app.models.audit_log import AuditLog

from tests.conftest import bearer


async def test_requires_token(client):
    r = await client.post("/api/audit-log", json={"action": "login"})

    assert r.status_code == 401
    assert r.json() == {
        "error": "Unauthorized: Missing authorization header",
        "code": "UNAUTHORIZED",
        "hint": r.json()["hint"],
    }


async def test_rejects_bad_token(client):
    r = await client.post("/api/audit-log", json={"action": "login"}, headers=bearer("not-a-jwt"))
    assert r.status_code == 401
    assert r.json()["error"] == "Unauthorized: Invalid token"


async def test_rejects_token_for_unknown_subject(client):
    token = create_access_token("missing-voter", "x@example.com", role="voter")
    r = await client.post("/api/audit-log", json={"action": "login"}, headers=bearer(token))
    assert r.status_code == 401


async def test_body_user_id_is_ignored(client, session_factory, make_admin, admin_token):
    admin = await make_admin()

    r = await client.post(
        "/api/audit-log",
        json={
            "action": "candidate_created",
            "user_id": "someone-else",
            "entity_type": "candidate",
            "entity_id": "c-1",
            "details": {"name": "Ada"},
        },
        headers=bearer(admin_token(admin)),
    )

    assert r.status_code == 200
    assert r.json() == {"success": True}

    async with session_factory() as s:
        row = (await s.execute(select(AuditLog))).scalar_one()
    assert row.user_id == str(admin.id)
    assert row.user_type == "admin"
    assert row.entity_type == "candidate"
    assert row.details == {"name": "Ada"}
    assert row.ip_address


async def test_action_is_required(client, session_factory, make_admin, admin_token):
    admin = await make_admin()

    r = await client.post("/api/audit-log", json={"action": "  "}, headers=bearer(admin_token(admin)))

    assert r.status_code == 400
    assert r.json()["error"] == "Bad Request: action is required"
    async with session_factory() as s:
        assert (await s.execute(select(AuditLog))).scalars().all() == []


async def test_deactivated_admin_is_refused(client, make_admin, admin_token):
    admin = await make_admin(is_active=False)
    r = await client.post("/api/audit-log", json={"action": "x"}, headers=bearer(admin_token(admin)))
    assert r.status_code == 403
