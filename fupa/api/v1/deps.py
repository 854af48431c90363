"""
FastAPI dependencies — auth guards, database session, clock and collaborators.

Everything a handler needs is injected here, so tests can swap the clock or
the media store through ``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.core.config import settings
from fupa.core.rules import ShiftPolicy
from fupa.core.security import ACCESS, decode_token
from fupa.db.session import async_session_factory
from fupa.models.user import User
from fupa.offline.manifest import ShellManifest
from fupa.services.media import CloudinaryMediaStore
from fupa.services.recorder import AttendanceRecorder, Clock

# auto_error=False so the cookie can be used when the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


# ── Policy, clock & collaborators ───────────────────────────────────
@lru_cache
def get_shift_policy() -> ShiftPolicy:
    return ShiftPolicy.from_settings(settings)


@lru_cache
def get_shell_manifest() -> ShellManifest:
    return ShellManifest.from_settings(settings)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    return _utc_now


@lru_cache
def get_media_store() -> CloudinaryMediaStore:
    return CloudinaryMediaStore.from_settings(settings)


def get_recorder(
    db: AsyncSession = Depends(get_db),
    policy: ShiftPolicy = Depends(get_shift_policy),
    clock: Clock = Depends(get_clock),
) -> AttendanceRecorder:
    return AttendanceRecorder(db, policy, clock)


# ── Who is calling ──────────────────────────────────────────────────
def _bearer_from_cookie(cookie: str | None) -> str | None:
    # /auth/login stores the cookie as "Bearer <jwt>"
    return cookie.removeprefix("Bearer ") if cookie else None


async def get_current_user(
    header_token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from the bearer header, falling back to the session cookie."""
    raw = header_token or _bearer_from_cookie(access_token)
    claims = decode_token(raw, ACCESS) if raw else None
    user = await db.get(User, claims["sub"]) if claims else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in or session expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_active:
        raise HTTPException(status_code=400, detail="Account is deactivated")
    return user


async def require_admin(user: User = Depends(get_current_active_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return user
