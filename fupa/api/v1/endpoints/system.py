"""
Liveness and today's activity at a glance.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import (get_clock, get_current_active_user, get_db,
                              get_shift_policy)
from fupa.core.config import settings
from fupa.core.rules import ShiftPolicy, local_date
from fupa.models.attendance import AttendanceRecord
from fupa.models.user import User
from fupa.schemas.attendance import HealthResponse, StatusResponse
from fupa.services.recorder import Clock

router = APIRouter(tags=["system"])
logger = logging.getLogger(__name__)


async def _database_up(db: AsyncSession) -> bool:
    try:
        await db.execute(select(1))
    except Exception as exc:
        logger.error("Database unreachable: %s", exc)
        return False
    return True


async def _redis_up() -> bool:
    client = aioredis.from_url(settings.REDIS_URL, socket_connect_timeout=2)
    try:
        await client.ping()
    except Exception as exc:
        logger.error("Redis unreachable: %s", exc)
        return False
    finally:
        await client.aclose()
    return True


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Unauthenticated probe of the backing services."""
    return HealthResponse(db=await _database_up(db), redis=await _redis_up())


@router.get("/status", response_model=StatusResponse)
async def system_status(
    db: AsyncSession = Depends(get_db),
    policy: ShiftPolicy = Depends(get_shift_policy),
    clock: Clock = Depends(get_clock),
    _user: User = Depends(get_current_active_user),
) -> StatusResponse:
    """Active employees and today's record count (today in the fixed time zone)."""
    today = local_date(clock(), policy)
    employees = await db.scalar(
        select(func.count(User.uid)).where(User.is_active.is_(True), User.role == "employee")
    )
    records = await db.scalar(
        select(func.count(AttendanceRecord.id)).where(AttendanceRecord.date == today)
    )
    return StatusResponse(
        date=today,
        total_employees=employees or 0,
        today_records=records or 0,
        status="operational",
    )
