"""
Attendance recorder — the idempotent clock-in / clock-out write.

A submission is stored under the deterministic id ``uid_date_kind``, so
retries and resubmissions on the same day land on the same record.  The
write is last-write-wins: every submission re-evaluates the status at its
own time and overwrites the previous status and reason.  A late
resubmission therefore downgrades an earlier on-time record.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.core.rules import (AttendanceKind, ShiftPolicy, attendance_doc_id,
                             evaluate_status, local_date)
from fupa.db.documents import merge_document
from fupa.models.attendance import AttendanceRecord
from fupa.services.media import CloudinaryMediaStore, MediaRef

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class AttendanceRecorder:
    def __init__(self, session: AsyncSession, policy: ShiftPolicy, clock: Clock) -> None:
        self._session = session
        self._policy = policy
        self._clock = clock

    async def save_attendance_unique(
        self,
        *,
        uid: str,
        name: str,
        kind: AttendanceKind,
        coords: dict[str, Any] | None,
        photo: MediaRef,
    ) -> AttendanceRecord:
        """Write today's record for ``kind``, replacing any earlier submission.

        An overwrite logs the status it replaced; the write goes ahead either way.
        """
        now = self._clock()
        ymd = local_date(now, self._policy)
        doc_id = attendance_doc_id(uid, ymd, kind)
        result = evaluate_status(now, kind, self._policy)

        payload = {
            "uid": uid,
            "name": name,
            "date": ymd,
            "kind": kind.value,
            "status": result.status.value,
            "reason": result.reason,
            "time_server": func.now(),
            "time_client": now.isoformat(),
            "coords": coords or None,
            "photo_url": photo.url,
            "public_id": photo.public_id,
        }
        outcome = await merge_document(self._session, AttendanceRecord, doc_id, payload)

        if outcome.created:
            logger.info("Attendance %s recorded: %s", doc_id, result.status.value)
        else:
            logger.info(
                "Attendance %s overwritten: %s -> %s",
                doc_id,
                outcome.previous.get("status") if outcome.previous else None,
                result.status.value,
            )
        return outcome.record

    async def delete_attendance_entry(self, record: AttendanceRecord, media: CloudinaryMediaStore) -> bool:
        """Delete ``record`` then soft-delete its photo.

        The two steps are independent: once the row is committed as deleted it
        stays deleted even if the photo delete fails.  Returns whether the photo
        was confirmed deleted.
        """
        doc_id, public_id = record.id, record.public_id
        await self._session.delete(record)
        await self._session.commit()
        logger.info("Attendance %s deleted", doc_id)

        photo_deleted = await media.soft_delete(public_id)
        if not photo_deleted and public_id:
            logger.warning("Photo %s of attendance %s left orphaned", public_id, doc_id)
        return photo_deleted
