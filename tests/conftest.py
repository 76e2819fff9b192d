import os

# Settings are read at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from dataclasses import dataclass, field

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, attach_database, build_sessionmaker, import_models
from app.core.email_service import get_mailer
from app.core.errors import ConfigurationError, DeliveryError
from app.core.security import create_access_token
from app.core.upload_storage import UploadKind, UploadStore, get_upload_store
from app.main import create_app
from app.models.voter import VoterProfile


# ── Fakes ─────────────────────────────────────────────────────────────

@dataclass
class SentMail:
    to_email: str
    subject: str
    html: str
    from_name: str | None


class FakeMailer:
    def __init__(self, configured: bool = True, fail: bool = False) -> None:
        self.configured = configured
        self.fail = fail
        self.sent: list[SentMail] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("Email service not configured")

    async def send(self, to_email, subject, html, from_name=None):
        self.ensure_configured()
        if self.fail:
            raise DeliveryError("Failed to send email")
        self.sent.append(SentMail(to_email, subject, html, from_name))
        return {"id": f"fake-{len(self.sent)}"}


@dataclass
class FakeMinio:
    buckets: set = field(default_factory=set)
    objects: dict = field(default_factory=dict)

    def bucket_exists(self, bucket):
        return bucket in self.buckets

    def make_bucket(self, bucket):
        self.buckets.add(bucket)

    def put_object(self, bucket, object_name, data, length, content_type):
        self.objects[(bucket, object_name)] = (data.read(), content_type)

    def presigned_get_object(self, bucket_name, object_name, expires):
        return f"https://minio.test/{bucket_name}/{object_name}?signed=1"


# ── Database ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ── App ───────────────────────────────────────────────────────────────

@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def minio():
    return FakeMinio()


@pytest.fixture
def app(engine, mailer, minio):
    application = create_app()
    attach_database(application, engine)
    application.dependency_overrides[get_mailer] = lambda: mailer
    application.dependency_overrides[get_upload_store] = lambda: UploadStore(
        minio,
        buckets={UploadKind.PHOTO: "photos", UploadKind.PAYMENT_PROOF: "payments"},
    )
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── Helpers ───────────────────────────────────────────────────────────

def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def make_voter(session_factory):
    async def _make(
        email: str = "voter@example.com",
        matric: str = "21/08NUS014",
        verified: bool = True,
        voted: bool = False,
    ) -> VoterProfile:
        async with session_factory() as s:
            voter = VoterProfile(
                matric=matric,
                name="Test Voter",
                email=email,
                verified=verified,
                voted=voted,
                issuance_token=f"token-{matric}",
            )
            s.add(voter)
            await s.commit()
            return voter

    return _make


@pytest_asyncio.fixture
async def make_admin(session_factory):
    from app.core.security import hash_password
    from app.models.admin import Admin

    async def _make(
        email: str = "committee@cohssa.org",
        password: str = "Secret@2026",
        is_active: bool = True,
    ) -> Admin:
        async with session_factory() as s:
            admin = Admin(
                name="Electoral Committee",
                email=email,
                password_hash=hash_password(password),
                is_active=is_active,
            )
            s.add(admin)
            await s.commit()
            return admin

    return _make


@pytest.fixture
def voter_token():
    def _token(voter: VoterProfile) -> str:
        return create_access_token(voter.id, voter.email, role="voter")

    return _token


@pytest.fixture
def admin_token():
    def _token(admin) -> str:
        return create_access_token(admin.id, admin.email, role="admin")

    return _token


@pytest_asyncio.fixture
async def make_stage(session_factory):
    from datetime import datetime, timedelta, timezone

    from app.models.election_timeline import ElectionTimeline

    async def _make(
        stage_name: str,
        is_active: bool = True,
        opens_in: timedelta = timedelta(hours=-1),
        lasts: timedelta = timedelta(hours=2),
        is_publicly_visible: bool = True,
    ) -> ElectionTimeline:
        start = datetime.now(timezone.utc) + opens_in
        async with session_factory() as s:
            stage = ElectionTimeline(
                stage_name=stage_name,
                start_time=start,
                end_time=start + lasts,
                is_active=is_active,
                is_publicly_visible=is_publicly_visible,
            )
            s.add(stage)
            await s.commit()
            return stage

    return _make
