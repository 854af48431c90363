"""
Override rules and announcements — admin-authored, readable by everyone signed in.

Override rules are independent documents; when several cover the same day the
most recently created one is reported by ``/overrides/for-date``.
Announcements are append-only: there is no update endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import get_current_active_user, get_db, require_admin
from fupa.models.announcement import Announcement
from fupa.models.override import OverrideRule
from fupa.models.user import User
from fupa.schemas.attendance import DeleteResponse
from fupa.schemas.board import (AnnouncementCreate, AnnouncementRead,
                                OverrideCreate, OverrideRead, check_date)

router = APIRouter(tags=["board"])
logger = logging.getLogger(__name__)


# ── Override rules ──────────────────────────────────────────────────
@router.post("/overrides", response_model=OverrideRead, status_code=201)
async def create_override(
    body: OverrideCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> OverrideRule:
    rule = OverrideRule(
        mode=body.mode.value,
        start=body.start,
        end=body.end,
        description=body.description,
    )
    db.add(rule)
    await db.commit()
    await db.refresh(rule)
    logger.info("Override %s created: %s %s..%s", rule.id, rule.mode, rule.start, rule.end)
    return rule


@router.get("/overrides", response_model=list[OverrideRead])
async def list_overrides(
    limit: int = Query(default=100, le=500),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[OverrideRule]:
    result = await db.execute(
        select(OverrideRule).order_by(OverrideRule.start.desc()).limit(limit)
    )
    return list(result.scalars().all())


@router.get("/overrides/for-date", response_model=OverrideRead | None)
async def get_override_for_date(
    date: str = Query(..., description="YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> OverrideRule | None:
    """Return the newest rule whose range covers ``date``, or null."""
    try:
        date = check_date(date)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None

    result = await db.execute(
        select(OverrideRule)
        .where(OverrideRule.start <= date, OverrideRule.end >= date)
        .order_by(OverrideRule.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.delete("/overrides/{override_id}", response_model=DeleteResponse)
async def delete_override(
    override_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    rule = await db.get(OverrideRule, override_id)
    if rule is None:
        raise HTTPException(status_code=404, detail="Override not found")

    await db.delete(rule)
    await db.commit()
    logger.info("Override %s deleted", override_id)
    return DeleteResponse(success=True, deleted_id=override_id)


# ── Announcements ───────────────────────────────────────────────────
@router.post("/announcements", response_model=AnnouncementRead, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Announcement:
    announcement = Announcement(**body.model_dump())
    db.add(announcement)
    await db.commit()
    await db.refresh(announcement)
    logger.info("Announcement %s posted for %s %s", announcement.id, body.date, body.time)
    return announcement


@router.get("/announcements", response_model=list[AnnouncementRead])
async def list_announcements(
    limit: int = Query(default=20, le=200),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[Announcement]:
    result = await db.execute(
        select(Announcement)
        .order_by(Announcement.date.desc(), Announcement.time.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


@router.delete("/announcements/{announcement_id}", response_model=DeleteResponse)
async def delete_announcement(
    announcement_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    announcement = await db.get(Announcement, announcement_id)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")

    await db.delete(announcement)
    await db.commit()
    return DeleteResponse(success=True, deleted_id=announcement_id)
