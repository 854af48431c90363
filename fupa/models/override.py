"""
OverrideRule model — admin-set date ranges that change attendance requirements.

Rules are independent rows: overlapping ranges may coexist and the reader
decides which one applies.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String

from fupa.db.base import Base


class OverrideRule(Base):
    __tablename__ = "overrides"
    __table_args__ = (Index("ix_overrides_range", "start", "end"),)

    id: str = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)  # type: ignore[assignment]
    mode: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # no_attendance_required | attendance_mandatory
    start: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    end: str = Column(String(10), nullable=False)  # type: ignore[assignment]  # YYYY-MM-DD
    description: str = Column(String(500), nullable=False, default="")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
