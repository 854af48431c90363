"""
AttendanceRecord model — one row per (user, calendar day, event kind).

The primary key is the deterministic document id ``uid_date_kind`` so a
resubmission lands on the same row instead of creating a new one.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String

from fupa.db.base import Base


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    __table_args__ = (Index("ix_attendance_uid_date", "uid", "date"),)

    id: str = Column(String(120), primary_key=True)  # type: ignore[assignment]  # uid_date_kind
    uid: str = Column(String(36), nullable=False, index=True)  # type: ignore[assignment]
    name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    kind: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # in | out
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    reason: str = Column(String(300), nullable=False, default="")  # type: ignore[assignment]
    time_server: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    time_client: str | None = Column(String(40), nullable=True)  # type: ignore[assignment]
    coords: dict | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    photo_url: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    public_id: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
