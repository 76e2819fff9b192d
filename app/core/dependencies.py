from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.database import get_db
from app.core.errors import Forbidden, Unauthorized
from app.core.security import Role, read_claims
from app.models.admin import Admin
from app.models.voter import VoterProfile

bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Whoever a verified bearer token belongs to."""
    user_id: str
    role: Role
    email: str


async def _load_admin(db: AsyncSession, subject: str) -> Admin:
    try:
        admin_id = int(subject)
    except ValueError:
        raise Unauthorized() from None
    admin = (await db.execute(select(Admin).where(Admin.id == admin_id))).scalar_one_or_none()
    if admin is None:
        raise Unauthorized()
    if not admin.is_active:
        raise Forbidden("This admin account has been deactivated")
    return admin


async def _load_voter(db: AsyncSession, subject: str) -> VoterProfile:
    voter = (await db.execute(select(VoterProfile).where(VoterProfile.id == subject))).scalar_one_or_none()
    if voter is None:
        raise Unauthorized()
    return voter


async def _resolve(
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
) -> tuple[Role, Admin | VoterProfile]:
    if not credentials:
        raise Unauthorized("Unauthorized: Missing authorization header")
    try:
        claims = read_claims(credentials.credentials)
    except JWTError:
        raise Unauthorized() from None

    if claims.role is Role.ADMIN:
        return claims.role, await _load_admin(db, claims.subject)
    return claims.role, await _load_voter(db, claims.subject)


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    role, account = await _resolve(credentials, db)
    return Principal(user_id=str(account.id), role=role, email=account.email)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> Admin:
    role, account = await _resolve(credentials, db)
    if role is not Role.ADMIN:
        raise Forbidden("Not authorized as admin")
    return account


async def get_current_voter(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> VoterProfile:
    role, account = await _resolve(credentials, db)
    if role is not Role.VOTER:
        raise Forbidden("Not authorized as voter")
    return account


async def get_optional_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> Principal | None:
    """Anonymous callers get None; a token that is sent must still be valid."""
    if not credentials:
        return None
    return await get_current_principal(credentials, db)
