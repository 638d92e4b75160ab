from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import SubstitutionStatus


@dataclass(frozen=True)
class Substitution:
    """A teacher covering a class on a given date.

    `teacher_id` is the substitute; `original_teacher_id` the teacher being covered.
    """

    substitution_id: str
    teacher_id: str
    teacher_name: str
    class_id: str
    class_name: str
    date: date
    start_time: time
    end_time: time
    reason: str
    status: SubstitutionStatus
    created_at: datetime
    original_teacher_id: Optional[str] = None
    original_teacher_name: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewSubstitution:
    teacher_id: str
    teacher_name: str
    class_id: str
    class_name: str
    date: date
    start_time: time
    end_time: time
    reason: str
    status: SubstitutionStatus
    original_teacher_id: Optional[str] = None
    original_teacher_name: Optional[str] = None
