"""Pydantic schemas for accounts and profiles."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator


class Role(str, Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


# Landing page per role, served by the PWA front end.
HOME_PAGES = {
    Role.ADMIN.value: "/admin.html",
    Role.EMPLOYEE.value: "/karyawan.html",
}


class EmployeeCreate(BaseModel):
    email: str
    password: str
    role: Role = Role.EMPLOYEE

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("Invalid email address")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class EmployeeCreated(BaseModel):
    uid: str


class UserRead(BaseModel):
    uid: str
    email: str
    name: str
    address: str
    photo_url: str
    role: str
    is_active: bool
    created_at: datetime | None

    model_config = {"from_attributes": True}


class CurrentUser(UserRead):
    home: str


class ProfileUpdate(BaseModel):
    name: str | None = None
    address: str | None = None
    photo_url: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v
