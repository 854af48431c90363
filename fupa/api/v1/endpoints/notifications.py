"""
Per-user notifications — pushed by admins, read and dismissed by the recipient.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import get_current_active_user, get_db, require_admin
from fupa.models.announcement import Notification
from fupa.models.user import User
from fupa.schemas.attendance import DeleteResponse
from fupa.schemas.board import NotificationCreate, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


async def _owned_notification(db: AsyncSession, notif_id: str, user: User) -> Notification:
    notif = await db.get(Notification, notif_id)
    if notif is None or (notif.uid != user.uid and user.role != "admin"):
        raise HTTPException(status_code=404, detail="Notification not found")
    return notif


@router.post("", response_model=NotificationRead, status_code=201)
async def push_notification(
    body: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Notification:
    if await db.get(User, body.uid) is None:
        raise HTTPException(status_code=404, detail="Recipient not found")

    notif = Notification(uid=body.uid, title=body.title, body=body.body)
    db.add(notif)
    await db.commit()
    await db.refresh(notif)
    logger.info("Notification %s pushed to %s", notif.id, body.uid)
    return notif


@router.get("/me", response_model=list[NotificationRead])
async def my_notifications(
    unread_only: bool = False,
    limit: int = Query(default=50, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Notification]:
    query = (
        select(Notification)
        .where(Notification.uid == current_user.uid)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    if unread_only:
        query = query.where(Notification.read.is_(False))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/{notif_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notif_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Notification:
    notif = await _owned_notification(db, notif_id, current_user)
    notif.read = True
    await db.commit()
    await db.refresh(notif)
    return notif


@router.delete("/{notif_id}", response_model=DeleteResponse)
async def delete_notification(
    notif_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> DeleteResponse:
    notif = await _owned_notification(db, notif_id, current_user)
    await db.delete(notif)
    await db.commit()
    return DeleteResponse(success=True, deleted_id=notif_id)
