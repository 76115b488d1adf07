import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.auth.models import RefreshToken, User
from volei.auth.schemas import LoginRequest, LoginResponse, UserInfo
from volei.auth.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from volei.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


async def _issue_session(db: AsyncSession, user: User) -> LoginResponse:
    issued_at = datetime.now(timezone.utc)
    access_payload = {
        "sub": str(user.id),
        "user_id": str(user.id),
        "role": user.role,
        "iat": int(issued_at.timestamp()),
    }
    access_token = create_access_token(subject=access_payload)

    refresh_token_str, refresh_expires_at = create_refresh_token()
    db.add(RefreshToken(user_id=user.id, token=refresh_token_str, expires_at=refresh_expires_at))
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        raise ServiceError(
            "Failed to persist authentication state",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token_str,
        user=UserInfo(id=user.id, name=user.full_name, email=user.email, role=user.role),
        issued_at=issued_at,
    )


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    # Email match is case-insensitive
    result = await db.execute(select(User).where(func.lower(User.email) == func.lower(payload.email)))
    user: Optional[User] = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("Failed login for %s", payload.email)
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    if user.status != "ACTIVE":
        raise ServiceError("User is inactive", status.HTTP_403_FORBIDDEN)

    logger.info("User %s signed in", user.id)
    return await _issue_session(db, user)


async def refresh_session(db: AsyncSession, refresh_token: str) -> LoginResponse:
    """Exchange a stored refresh token for a new session. The old token is consumed."""
    result = await db.execute(select(RefreshToken).where(RefreshToken.token == refresh_token))
    stored = result.scalar_one_or_none()
    if not stored:
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)

    expires_at = stored.expires_at
    if expires_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    user_result = await db.execute(select(User).where(User.id == stored.user_id))
    user = user_result.scalar_one_or_none()

    await db.delete(stored)
    if expires_at <= datetime.now(timezone.utc) or not user or user.status != "ACTIVE":
        await db.commit()
        raise ServiceError("Invalid refresh token", status.HTTP_401_UNAUTHORIZED)

    return await _issue_session(db, user)


async def logout_user(db: AsyncSession, user_id: UUID) -> int:
    """Revoke every refresh token of the user. Returns how many were removed."""
    result = await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
    await db.commit()
    logger.info("User %s signed out", user_id)
    return result.rowcount or 0


async def create_admin_user(
    db: AsyncSession,
    email: str,
    password: str,
    full_name: str,
) -> User:
    existing = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    if existing.scalar_one_or_none():
        raise ServiceError(f"User with email '{email}' already exists", status.HTTP_409_CONFLICT)
    user = User(
        full_name=full_name,
        email=email.strip(),
        password_hash=hash_password(password),
        role="ADMIN",
        status="ACTIVE",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError(f"User with email '{email}' already exists", status.HTTP_409_CONFLICT)
    await db.refresh(user)
    return user
