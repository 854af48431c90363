"""Pydantic schemas for attendance records, photos and system endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from fupa.core.rules import AttendanceKind


# ── Attendance ──────────────────────────────────────────────────────
class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)


class AttendanceSubmit(BaseModel):
    kind: AttendanceKind
    coords: Coordinates | None = None
    photo_url: str
    public_id: str

    @field_validator("photo_url")
    @classmethod
    def _photo_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("photo_url must be an http(s) URL")
        return v

    @field_validator("public_id")
    @classmethod
    def _public_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("public_id must not be empty")
        return v


class AttendanceRead(BaseModel):
    id: str
    uid: str
    name: str | None
    date: str
    kind: str
    status: str
    reason: str
    time_server: datetime | None
    time_client: str | None
    coords: Coordinates | None = None
    photo_url: str | None
    public_id: str | None

    model_config = {"from_attributes": True}


class AttendanceDeleteResponse(BaseModel):
    success: bool
    deleted_id: str
    photo_deleted: bool


# ── Photo ───────────────────────────────────────────────────────────
class PhotoUploadResponse(BaseModel):
    url: str
    public_id: str


# ── Health / Status ────────────────────────────────────────────────
class HealthResponse(BaseModel):
    db: bool
    redis: bool


class StatusResponse(BaseModel):
    date: str
    total_employees: int
    today_records: int
    status: str


# ── Generic ────────────────────────────────────────────────────────
class LogoutResponse(BaseModel):
    message: str


class DeleteResponse(BaseModel):
    success: bool
    deleted_id: str
