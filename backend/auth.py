# auth.py — Authentication for the Todo API
# Features:
# - bcrypt password hashing
# - Bearer JWT sessions with JTI for revocation (10-day expiry by default)
# - Credential attempt that never reveals which part failed
# - FastAPI dependency resolving the calling user

import os
import re
import uuid
import secrets
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db_session
from models import User, RevokedToken
from services.errors import InvalidCredentials

logger = logging.getLogger("todo-api.auth")

# ============================================================
# CONFIGURATION
# ============================================================

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
if len(SECRET_KEY) < 32:
    SECRET_KEY = secrets.token_urlsafe(64)
    logger.warning(
        "JWT_SECRET_KEY not set or too short. Generated ephemeral key. "
        "Set JWT_SECRET_KEY in production!"
    )

ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "10"))
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128
MAX_EMAIL_LENGTH = 255

_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

security = HTTPBearer()


# ============================================================
# PYDANTIC SCHEMAS
# ============================================================

def _check_password(v: str) -> str:
    if not _PASSWORD_PATTERN.match(v):
        raise ValueError(
            "Password must contain at least one lowercase letter, "
            "one uppercase letter, and one digit"
        )
    return v


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) > MAX_EMAIL_LENGTH:
        raise ValueError(f"Email must not exceed {MAX_EMAIL_LENGTH} characters")
    return v


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(
        default=None, min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH,
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_password(v)


class CurrentUser(BaseModel):
    id: int
    name: str
    email: str
    jti: Optional[str] = None
    expires_at: Optional[datetime] = None


def _bcrypt_input(password: str) -> bytes:
    # bcrypt only considers the first 72 bytes and newer releases reject longer input
    return password.encode("utf-8")[:72]


# ============================================================
# AUTH SERVICE
# ============================================================

class AuthService:
    """Password hashing and session token issuance"""

    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt(rounds=12)
        return bcrypt.hashpw(_bcrypt_input(password), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(_bcrypt_input(password), password_hash.encode("utf-8"))

    @staticmethod
    def issue_token(user: User, expires_delta: Optional[timedelta] = None) -> Dict[str, Any]:
        """Create a bearer token for the user. Returns the token and its expiry."""
        now = datetime.now(timezone.utc)
        expires_at = now + (expires_delta or timedelta(days=TOKEN_EXPIRE_DAYS))
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "iat": now,
            "exp": expires_at,
            "jti": str(uuid.uuid4()),
        }
        return {
            "type": "bearer",
            "token": jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM),
            "expires_at": expires_at.isoformat(),
        }

    @staticmethod
    def verify_token(token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
            return payload
        except ExpiredSignatureError:
            raise HTTPException(status_code=401, detail="Token expired")
        except JWTError:
            raise HTTPException(status_code=401, detail="Invalid token")

    @staticmethod
    async def attempt(email: str, password: str, db: AsyncSession) -> Dict[str, Any]:
        """Verify credentials and issue a token, or raise InvalidCredentials."""
        stmt = select(User).where(User.email == email)
        result = await db.execute(stmt)
        user = result.scalar_one_or_none()

        if not user or not AuthService.verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid email or password")

        return AuthService.issue_token(user)

    @staticmethod
    async def is_token_revoked(jti: str, db: AsyncSession) -> bool:
        stmt = select(RevokedToken).where(RevokedToken.jti == jti)
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def revoke_token(jti: str, user_id: int, expires_at: datetime, db: AsyncSession) -> None:
        if await AuthService.is_token_revoked(jti, db):
            return
        revoked = RevokedToken(jti=jti, user_id=user_id, expires_at=expires_at)
        db.add(revoked)
        await db.commit()


# ============================================================
# FASTAPI DEPENDENCIES
# ============================================================

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> CurrentUser:
    payload = AuthService.verify_token(credentials.credentials)

    # Check revocation
    jti = payload.get("jti")
    if jti and await AuthService.is_token_revoked(jti, db):
        raise HTTPException(status_code=401, detail="Token has been revoked")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")

    stmt = select(User).where(User.id == user_id)
    result = await db.execute(stmt)
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    exp = payload.get("exp")
    return CurrentUser(
        id=user.id,
        name=user.name,
        email=user.email,
        jti=jti,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )
