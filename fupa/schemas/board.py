"""Pydantic schemas for override rules, announcements and notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator, model_validator


def check_date(v: str) -> str:
    """Parse ``YYYY-MM-DD`` and return it zero-padded, so stored keys compare as strings."""
    try:
        return datetime.strptime(v.strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValueError("Date must be YYYY-MM-DD") from None


# ── Overrides ───────────────────────────────────────────────────────
class OverrideMode(str, Enum):
    NO_ATTENDANCE_REQUIRED = "no_attendance_required"
    ATTENDANCE_MANDATORY = "attendance_mandatory"


class OverrideCreate(BaseModel):
    mode: OverrideMode
    start: str
    end: str
    description: str = ""

    @field_validator("start", "end")
    @classmethod
    def _date(cls, v: str) -> str:
        return check_date(v)

    @model_validator(mode="after")
    def _range(self) -> "OverrideCreate":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


class OverrideRead(BaseModel):
    id: str
    mode: str
    start: str
    end: str
    description: str
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Announcements ───────────────────────────────────────────────────
class AnnouncementCreate(BaseModel):
    date: str
    time: str
    description: str

    @field_validator("date")
    @classmethod
    def _date(cls, v: str) -> str:
        return check_date(v)

    @field_validator("time")
    @classmethod
    def _time(cls, v: str) -> str:
        v = v.strip()
        try:
            datetime.strptime(v, "%H:%M")
        except ValueError:
            raise ValueError("Time must be HH:MM") from None
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description must not be empty")
        return v


class AnnouncementRead(BaseModel):
    id: str
    date: str
    time: str
    description: str
    created_at: datetime | None

    model_config = {"from_attributes": True}


# ── Notifications ───────────────────────────────────────────────────
class NotificationCreate(BaseModel):
    uid: str
    title: str
    body: str = ""

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v


class NotificationRead(BaseModel):
    id: str
    uid: str
    title: str
    body: str
    read: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}
