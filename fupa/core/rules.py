"""
Attendance status rule and calendar-day derivation.

Everything here is pure: no clock reads, no I/O.  The caller passes the
instant to classify and the ``ShiftPolicy`` to classify it under.

Boundaries (all local to the policy's fixed UTC offset):

* clock-in before ``clock_in_opens``           -> outside_window
* clock-in up to and including the deadline     -> on_time
* clock-in any instant after the deadline       -> late
* clock-out before ``clock_out_opens``          -> early_leave
* clock-out at or after ``clock_out_opens``     -> on_time
* any event on a weekly off-day                 -> day_off
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from enum import Enum


class AttendanceKind(str, Enum):
    CLOCK_IN = "in"
    CLOCK_OUT = "out"


class AttendanceStatus(str, Enum):
    ON_TIME = "on_time"
    LATE = "late"
    EARLY_LEAVE = "early_leave"
    OUTSIDE_WINDOW = "outside_window"
    DAY_OFF = "day_off"


_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class StatusResult:
    status: AttendanceStatus
    reason: str


def parse_utc_offset(value: str) -> timezone:
    """Parse ``+HH:MM`` / ``-HH:MM`` / ``+HH`` into a fixed-offset timezone."""
    value = value.strip()
    if not value or value[0] not in "+-":
        raise ValueError(f"UTC offset must start with '+' or '-': {value!r}")
    sign = 1 if value[0] == "+" else -1
    parts = value[1:].split(":")
    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) > 1 else 0
    if hours > 23 or minutes > 59:
        raise ValueError(f"UTC offset out of range: {value!r}")
    return timezone(timedelta(hours=sign * hours, minutes=sign * minutes))


def parse_clock(value: str) -> time:
    """Parse ``HH:MM`` into a ``time``."""
    hour, minute = value.strip().split(":")
    return time(int(hour), int(minute))


@dataclass(frozen=True)
class ShiftPolicy:
    tz: timezone
    clock_in_opens: time
    clock_in_deadline: time
    clock_out_opens: time
    off_days: frozenset[int] = frozenset({6})

    def __post_init__(self) -> None:
        if self.clock_in_opens > self.clock_in_deadline:
            raise ValueError("clock-in window must open before its deadline")

    @classmethod
    def from_settings(cls, settings) -> "ShiftPolicy":
        return cls(
            tz=parse_utc_offset(settings.TIMEZONE_OFFSET),
            clock_in_opens=parse_clock(settings.CLOCK_IN_OPENS),
            clock_in_deadline=parse_clock(settings.CLOCK_IN_DEADLINE),
            clock_out_opens=parse_clock(settings.CLOCK_OUT_OPENS),
            off_days=frozenset(settings.WEEKLY_OFF_DAYS),
        )

    def localize(self, now: datetime) -> datetime:
        """Convert an instant to the policy's wall clock; naive input is UTC."""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz)


def local_date(now: datetime, policy: ShiftPolicy) -> str:
    """Calendar-day key (``YYYY-MM-DD``) of ``now`` under the fixed offset."""
    return policy.localize(now).strftime("%Y-%m-%d")


def attendance_doc_id(uid: str, date: str, kind: AttendanceKind | str) -> str:
    kind_value = kind.value if isinstance(kind, AttendanceKind) else kind
    return f"{uid}_{date}_{kind_value}"


def _at(local: datetime, clock: time) -> datetime:
    return local.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)


def _hhmm(clock: time) -> str:
    return clock.strftime("%H:%M")


def evaluate_status(now: datetime, kind: AttendanceKind | str, policy: ShiftPolicy) -> StatusResult:
    """Classify a clock-in / clock-out submitted at ``now``."""
    kind = AttendanceKind(kind)
    local = policy.localize(now)

    if local.weekday() in policy.off_days:
        return StatusResult(
            AttendanceStatus.DAY_OFF,
            f"{_WEEKDAY_NAMES[local.weekday()]} is a day off",
        )

    if kind is AttendanceKind.CLOCK_IN:
        if local < _at(local, policy.clock_in_opens):
            return StatusResult(
                AttendanceStatus.OUTSIDE_WINDOW,
                f"Clock-in opens at {_hhmm(policy.clock_in_opens)}",
            )
        deadline = _at(local, policy.clock_in_deadline)
        if local <= deadline:
            return StatusResult(
                AttendanceStatus.ON_TIME,
                f"Clocked in by {_hhmm(policy.clock_in_deadline)}",
            )
        minutes_late = math.ceil((local - deadline).total_seconds() / 60)
        return StatusResult(
            AttendanceStatus.LATE,
            f"Clocked in {minutes_late} min after {_hhmm(policy.clock_in_deadline)}",
        )

    if local < _at(local, policy.clock_out_opens):
        return StatusResult(
            AttendanceStatus.EARLY_LEAVE,
            f"Clocked out before {_hhmm(policy.clock_out_opens)}",
        )
    return StatusResult(
        AttendanceStatus.ON_TIME,
        f"Clocked out from {_hhmm(policy.clock_out_opens)}",
    )
