"""Password hashing, JWT issuance, and requester resolution."""

import bcrypt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from clubhouse.core.config import settings
from clubhouse.core.exceptions import AuthenticationError
from clubhouse.models.user import SystemRoleEnum

# JWT bearer scheme
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The requester identity every service call receives explicitly."""

    user_id: int
    system_role: SystemRoleEnum = SystemRoleEnum.USER


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(pwd_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    pwd_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(pwd_bytes, hashed_bytes)


def create_access_token(user_id: int, system_role: SystemRoleEnum, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token carrying ``(sub, role)``."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)
    )
    to_encode = {
        "sub": str(user_id),
        "role": SystemRoleEnum(system_role).value,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def principal_from_token(token: str) -> Principal:
    """Resolve a bearer token to the requester identity."""
    payload = decode_token(token)
    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")
    try:
        role = SystemRoleEnum(payload.get("role", SystemRoleEnum.USER.value))
        return Principal(user_id=int(user_id), system_role=role)
    except ValueError:
        raise AuthenticationError("Invalid token payload")


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Principal:
    """FastAPI dependency: the authenticated requester."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return principal_from_token(credentials.credentials)
