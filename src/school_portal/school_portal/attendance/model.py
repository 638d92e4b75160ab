from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one class on one date."""

    attendance_id: str
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    created_by: str
    created_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceEntry:
    """One row of the class attendance form."""

    student_id: str
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None


@dataclass(frozen=True)
class StudentSummary:
    total: int
    present: int
    absent: int
    justified: int
    presence_rate: float
