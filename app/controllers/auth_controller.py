from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import Forbidden, Unauthorized
from app.core.security import Role, create_access_token, verify_password
from app.models.admin import Admin
from app.schemas.auth import AdminInfo, LoginRequest, LoginResponse, MeResponse


async def authenticate_admin(db: AsyncSession, email: str, password: str) -> Admin:
    """
    Unknown email and wrong password raise the same Unauthorized after a
    full bcrypt check. A deactivated account is reported only to someone
    who already knows its password.
    """
    res = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
    admin = res.scalar_one_or_none()

    if not verify_password(password, admin.password_hash if admin else None) or admin is None:
        raise Unauthorized("Invalid login credentials")
    if not admin.is_active:
        raise Forbidden("Account is deactivated. Contact support.")
    return admin


async def login(payload: LoginRequest, db: AsyncSession) -> LoginResponse:
    admin = await authenticate_admin(db, str(payload.email), payload.password)

    admin.last_login_at = datetime.now(timezone.utc)
    await db.flush()

    return LoginResponse(
        access_token=create_access_token(admin.id, admin.email, role=Role.ADMIN),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        admin=AdminInfo.model_validate(admin),
    )


async def get_me(admin: Admin) -> MeResponse:
    return MeResponse.model_validate(admin)
