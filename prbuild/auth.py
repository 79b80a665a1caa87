"""
PRBuild authentication.

bcrypt password hashes, JWT bearer tokens (8 hour expiry) and FastAPI
dependencies that resolve the calling profile and enforce roles.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from prbuild import config
from prbuild import storage

log = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class Role(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"
    JOURNALIST_REVIEWER = "journalist_reviewer"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def authenticate(email: str, password: str) -> Optional[dict]:
    profile = storage.get_profile_by_email(email)
    if not profile or not verify_password(password, profile["password_hash"]):
        return None
    return profile


def create_access_token(profile_id: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": profile_id, "role": role, "exp": expire}
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


def public_profile(profile: dict) -> dict:
    return {k: v for k, v in profile.items() if k != "password_hash"}


async def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> dict:
    """Profile of the bearer token's owner, or 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials)
    profile_id = payload.get("sub")
    profile = storage.get_profile(profile_id) if profile_id else None
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return profile


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    if user["role"] != Role.ADMIN.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")
    return user


def is_admin(user: dict) -> bool:
    return user.get("role") == Role.ADMIN.value


async def require_cron(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Scheduled jobs authenticate with `Authorization: Bearer $CRON_SECRET`."""
    if (not config.CRON_SECRET or credentials is None
            or not hmac.compare_digest(credentials.credentials, config.CRON_SECRET)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
