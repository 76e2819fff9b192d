"""
Password hashing for committee admins and bearer tokens for admins and voters.

Both roles share one token format; ``role`` decides which table the
subject is looked up in.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# verified against when there is no usable hash, so unknown emails cost a full bcrypt round
_DUMMY_HASH = "$2b$12$KIXa8pRj6u8OjKvI7bQsqOEkBqYHqFbY3Ku.Fsp7p/e8XGJ0XOGK6"

TOKEN_TYPE = "access"


class Role(str, Enum):
    ADMIN = "admin"
    VOTER = "voter"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    role: Role
    email: str


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    usable = bool(hashed) and len(hashed) >= 59
    try:
        matched = pwd_context.verify(plain, hashed if usable else _DUMMY_HASH)
    except ValueError:
        # malformed hash stored for the account
        return False
    return usable and matched


def create_access_token(
    subject: str | int,
    email: str,
    role: Role | str,
    expires_minutes: int | None = None,
) -> str:
    """
    Signs a token for an admin id or a voter profile id.
    Rotating SECRET_KEY invalidates every outstanding token.
    """
    now = datetime.now(timezone.utc)
    ttl = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(subject),
        "email": email,
        "role": Role(role).value,
        "type": TOKEN_TYPE,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Raises jose.JWTError on a bad signature or an expired token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def read_claims(token: str) -> TokenClaims:
    payload = decode_access_token(token)
    subject = str(payload.get("sub") or "").strip()
    if payload.get("type") != TOKEN_TYPE or not subject:
        raise JWTError("not an access token")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise JWTError("unknown role") from None
    return TokenClaims(subject=subject, role=role, email=payload.get("email") or "")
