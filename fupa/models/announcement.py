"""
Announcement & Notification models.

Announcements are broadcast to everyone and never edited; notifications are
addressed to a single user and carry a read flag.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String

from fupa.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Announcement(Base):
    __tablename__ = "announcements"

    id: str = Column(String(32), primary_key=True, default=_new_id)  # type: ignore[assignment]
    date: str = Column(String(10), nullable=False, index=True)  # type: ignore[assignment]  # YYYY-MM-DD
    time: str = Column(String(5), nullable=False)  # type: ignore[assignment]  # HH:MM
    description: str = Column(String(1000), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class Notification(Base):
    __tablename__ = "notifications"

    id: str = Column(String(32), primary_key=True, default=_new_id)  # type: ignore[assignment]
    uid: str = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False, index=True)  # type: ignore[assignment]
    title: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    body: str = Column(String(1000), nullable=False, default="")  # type: ignore[assignment]
    read: bool = Column(Boolean, nullable=False, default=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
