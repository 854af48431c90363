"""
Attendance endpoints — clock in / clock out, history, export, deletion.

- POST /attendance and POST /attendance/photo: any signed-in user, for themselves.
- GET /attendance/me: the caller's own records.
- GET /attendance, GET /attendance/export, DELETE /attendance/{doc_id}: admin only.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import (get_current_active_user, get_db,
                              get_media_store, get_recorder, require_admin)
from fupa.core.config import settings
from fupa.core.csv_export import export_to_csv
from fupa.core.rules import AttendanceKind
from fupa.models.attendance import AttendanceRecord
from fupa.models.user import User
from fupa.schemas.attendance import (AttendanceDeleteResponse, AttendanceRead,
                                     AttendanceSubmit, PhotoUploadResponse)
from fupa.schemas.board import check_date
from fupa.services.media import CloudinaryMediaStore, MediaRef
from fupa.services.recorder import AttendanceRecorder

router = APIRouter(prefix="/attendance", tags=["attendance"])
logger = logging.getLogger(__name__)


def _date_param(value: str | None, name: str) -> str | None:
    if value is None:
        return None
    try:
        return check_date(value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"{name}: {exc}") from None


def date_range(date_from: str | None = None, date_to: str | None = None) -> tuple[str | None, str | None]:
    """Query-string date bounds, normalised to zero-padded ``YYYY-MM-DD``."""
    return _date_param(date_from, "date_from"), _date_param(date_to, "date_to")


def _filtered(
    date_from: str | None,
    date_to: str | None,
    uid: str | None,
    kind: AttendanceKind | None,
):
    query = select(AttendanceRecord).order_by(
        AttendanceRecord.date.desc(), AttendanceRecord.uid, AttendanceRecord.kind
    )
    if date_from:
        query = query.where(AttendanceRecord.date >= date_from)
    if date_to:
        query = query.where(AttendanceRecord.date <= date_to)
    if uid:
        query = query.where(AttendanceRecord.uid == uid)
    if kind:
        query = query.where(AttendanceRecord.kind == kind.value)
    return query


def _export_row(record: AttendanceRecord) -> dict[str, object]:
    coords = record.coords or {}
    return {
        "uid": record.uid,
        "name": record.name,
        "date": record.date,
        "kind": record.kind,
        "status": record.status,
        "reason": record.reason,
        "time_client": record.time_client,
        "time_server": record.time_server.isoformat() if record.time_server else None,
        "lat": coords.get("lat"),
        "lng": coords.get("lng"),
        "photo_url": record.photo_url,
    }


@router.post("", response_model=AttendanceRead)
async def submit_attendance(
    body: AttendanceSubmit,
    recorder: AttendanceRecorder = Depends(get_recorder),
    current_user: User = Depends(get_current_active_user),
) -> AttendanceRecord:
    """Record the caller's clock-in / clock-out for today.

    Safe to retry. A resubmission for the same day and kind overwrites the
    earlier one, including its status.
    """
    return await recorder.save_attendance_unique(
        uid=current_user.uid,
        name=current_user.name,
        kind=body.kind,
        coords=body.coords.model_dump(exclude_none=True) if body.coords else None,
        photo=MediaRef(url=body.photo_url, public_id=body.public_id),
    )


@router.post("/photo", response_model=PhotoUploadResponse, status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    media: CloudinaryMediaStore = Depends(get_media_store),
    current_user: User = Depends(get_current_active_user),
) -> PhotoUploadResponse:
    """Upload a verification photo; the returned reference goes into POST /attendance."""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=415, detail="Photo must be an image")
    content = await file.read(settings.MAX_PHOTO_BYTES + 1)
    if not content:
        raise HTTPException(status_code=400, detail="Photo is empty")
    if len(content) > settings.MAX_PHOTO_BYTES:
        raise HTTPException(status_code=413, detail="Photo is too large")

    ref = await media.upload(content, file.filename or f"{current_user.uid}.jpg", file.content_type)
    return PhotoUploadResponse(url=ref.url, public_id=ref.public_id)


@router.get("/me", response_model=list[AttendanceRead])
async def my_attendance(
    dates: tuple[str | None, str | None] = Depends(date_range),
    limit: int = Query(default=62, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[AttendanceRecord]:
    result = await db.execute(
        _filtered(*dates, current_user.uid, None).limit(limit)
    )
    return list(result.scalars().all())


@router.get("", response_model=list[AttendanceRead])
async def list_attendance(
    dates: tuple[str | None, str | None] = Depends(date_range),
    uid: str | None = None,
    kind: AttendanceKind | None = None,
    skip: int = 0,
    limit: int = Query(default=200, le=1000),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[AttendanceRecord]:
    result = await db.execute(
        _filtered(*dates, uid, kind).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@router.get("/export")
async def export_attendance(
    dates: tuple[str | None, str | None] = Depends(date_range),
    uid: str | None = None,
    kind: AttendanceKind | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Response:
    """Download the filtered records as CSV; 404 when nothing matches."""
    result = await db.execute(_filtered(*dates, uid, kind))
    rows = [_export_row(record) for record in result.scalars().all()]
    content = export_to_csv(rows)

    date_from, date_to = dates
    filename = f"attendance_{date_from or 'all'}_{date_to or 'all'}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.delete("/{doc_id}", response_model=AttendanceDeleteResponse)
async def delete_attendance_entry(
    doc_id: str,
    db: AsyncSession = Depends(get_db),
    recorder: AttendanceRecorder = Depends(get_recorder),
    media: CloudinaryMediaStore = Depends(get_media_store),
    _admin: User = Depends(require_admin),
) -> AttendanceDeleteResponse:
    """Delete a record, then best-effort delete its photo.

    The record stays deleted even when the photo cannot be removed.
    """
    record = await db.get(AttendanceRecord, doc_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Attendance record not found")

    photo_deleted = await recorder.delete_attendance_entry(record, media)
    return AttendanceDeleteResponse(success=True, deleted_id=doc_id, photo_deleted=photo_deleted)
