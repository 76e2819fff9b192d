import httpx
from sqlalchemy import select, text

from app.models.audit_log import AuditLog
from app.models.otp_code import OtpCode

from tests.conftest import bearer


async def _live_code(session_factory, email):
    async with session_factory() as s:
        res = await s.execute(select(OtpCode.code).where(OtpCode.email == email).where(OtpCode.used.is_(False)))
        return res.scalar_one()


async def test_send_otp(client, mailer):
    r = await client.post("/api/otp/send", json={"email": "Voter@Example.com"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "OTP sent successfully"
    assert "expiresAt" in body
    assert mailer.sent[0].to_email == "voter@example.com"


async def test_send_otp_requires_email(client, mailer):
    r = await client.post("/api/otp/send", json={})

    assert r.status_code == 400
    assert r.json()["error"] == "Email is required"
    assert mailer.sent == []


async def test_send_otp_rejects_unknown_type(client):
    r = await client.post("/api/otp/send", json={"email": "a@b.co", "type": "magic"})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


async def test_send_otp_without_mail_configuration(client, mailer):
    mailer.configured = False

    r = await client.post("/api/otp/send", json={"email": "voter@example.com"})

    assert r.status_code == 500
    assert r.json()["error"] == "Email service not configured"
    assert r.json()["code"] == "CONFIGURATION_ERROR"


async def test_send_otp_delivery_failure(client, mailer):
    mailer.fail = True

    r = await client.post("/api/otp/send", json={"email": "voter@example.com"})

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to send email"


async def test_registration_flow(client, session_factory):
    await client.post("/api/otp/send", json={"email": "new@example.com", "type": "verification"})
    code = await _live_code(session_factory, "new@example.com")

    r = await client.post(
        "/api/otp/verify",
        json={"email": "new@example.com", "code": code, "type": "registration"},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["valid"] is True
    assert body["type"] == "registration"
    assert body["voter"] is None
    assert body["access_token"] is None


async def test_login_flow_issues_voter_token(client, session_factory, make_voter):
    voter = await make_voter(verified=False)
    await client.post("/api/otp/send", json={"email": voter.email})
    code = await _live_code(session_factory, voter.email)

    r = await client.post("/api/otp/verify", json={"email": voter.email, "code": code})

    assert r.status_code == 200
    body = r.json()
    assert body["valid"] is True
    assert body["voter"]["id"] == voter.id
    assert body["voter"]["verified"] is True
    assert "password" not in body["voter"]

    # the token authenticates follow-up requests
    r = await client.post(
        "/api/audit-log",
        json={"action": "voter_login"},
        headers=bearer(body["access_token"]),
    )
    assert r.status_code == 200

    async with session_factory() as s:
        row = (await s.execute(select(AuditLog))).scalar_one()
    assert row.user_id == voter.id
    assert row.user_type == "voter"


async def test_login_flow_without_profile(client, session_factory):
    await client.post("/api/otp/send", json={"email": "ghost@example.com"})
    code = await _live_code(session_factory, "ghost@example.com")

    r = await client.post("/api/otp/verify", json={"email": "ghost@example.com", "code": code})

    assert r.status_code == 404
    body = r.json()
    assert body["valid"] is False
    assert body["code"] == "IDENTITY_NOT_FOUND"


async def test_wrong_code(client, session_factory):
    await client.post("/api/otp/send", json={"email": "voter@example.com"})
    code = await _live_code(session_factory, "voter@example.com")
    wrong = "000000" if code != "000000" else "111111"

    r = await client.post(
        "/api/otp/verify",
        json={"email": "voter@example.com", "code": wrong, "type": "registration"},
    )

    assert r.status_code == 400
    body = r.json()
    assert body == {
        "error": "Invalid or expired code",
        "code": "INVALID_OR_EXPIRED_CODE",
        "valid": False,
        "hint": body["hint"],
    }
    assert body["hint"]["title"] == "Invalid Code"


async def test_verify_missing_fields(client):
    r = await client.post("/api/otp/verify", json={"email": "voter@example.com"})
    assert r.status_code == 400
    assert r.json()["error"] == "Email and code are required"


async def test_verify_storage_failure_is_json(client, engine):
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE otp_codes"))

    r = await client.post("/api/otp/verify", json={"email": "voter@example.com", "code": "123456"})

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Failed to verify OTP", "code": "PERSISTENCE_ERROR"}


async def test_unexpected_error_is_json(app):
    @app.get("/api/crash")
    async def crash():
        raise RuntimeError("boom")

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        r = await c.get("/api/crash")

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
