from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_class(self, class_id: str, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def create(
        self,
        *,
        student_id: str,
        class_id: str,
        day: date,
        status: AttendanceStatus,
        notes: Optional[str],
        created_by: str,
        created_at: datetime,
    ) -> str:
        raise NotImplementedError

    def update(self, attendance_id: str, *, status: AttendanceStatus, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: str) -> bool:
        raise NotImplementedError
