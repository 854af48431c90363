"""
Employee accounts and self-service profile.

- POST /users/employees and GET /users require the admin role.
- /profile/me is available to any signed-in user.

Creating an employee never touches the admin's own session: the new
credentials are written straight to the users table and no token is issued.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import get_current_active_user, get_db, require_admin
from fupa.core.security import hash_password
from fupa.db.documents import merge_document
from fupa.models.user import User
from fupa.schemas.user import (EmployeeCreate, EmployeeCreated, ProfileUpdate,
                               UserRead)

router = APIRouter(tags=["users"])
logger = logging.getLogger(__name__)


@router.post("/users/employees", response_model=EmployeeCreated, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> EmployeeCreated:
    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    uid = uuid.uuid4().hex
    await merge_document(
        db,
        User,
        uid,
        {
            "email": body.email,
            "hashed_password": hash_password(body.password),
            "name": body.email.split("@")[0],
            "address": "",
            "photo_url": "",
            "role": body.role.value,
        },
    )
    logger.info("Created %s account %s (%s)", body.role.value, uid, body.email)
    return EmployeeCreated(uid=uid)


@router.get("/users", response_model=list[UserRead])
async def list_users(
    role: str | None = None,
    skip: int = 0,
    limit: int = Query(default=100, le=500),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[User]:
    query = select(User).order_by(User.name).offset(skip).limit(limit)
    if role:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/profile/me", response_model=UserRead)
async def load_my_profile(
    current_user: User = Depends(get_current_active_user),
) -> User:
    return current_user


@router.put("/profile/me", response_model=UserRead)
async def update_my_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Merge the given profile fields; omitted fields keep their values."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        return current_user
    outcome = await merge_document(db, User, current_user.uid, changes)
    logger.info("Profile %s updated: %s", current_user.uid, sorted(changes))
    return outcome.record
