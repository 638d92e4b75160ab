from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_delete, can_edit
from ..users.model import User
from .model import AttendanceEntry, AttendanceRecord, StudentSummary
from .repository import AttendanceRepository


class AttendanceService:
    """Student attendance per class and date."""

    def __init__(self, attendance: AttendanceRepository, classes: ClassRepository):
        self._attendance = attendance
        self._classes = classes

    def _require_class(self, class_id: str) -> SchoolClass:
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise NotFoundError("Class not found")
        return cls

    @staticmethod
    def _check_editor(current_user: User) -> None:
        if not can_edit(current_user.role, "attendance"):
            raise AuthorizationError("You are not allowed to record attendance")

    @staticmethod
    def _parse_status(value) -> AttendanceStatus:
        if isinstance(value, AttendanceStatus):
            return value
        try:
            return AttendanceStatus(value or AttendanceStatus.PRESENT.value)
        except ValueError:
            raise ValidationError("Invalid attendance status")

    def record_class_attendance(
        self,
        *,
        current_user: User,
        class_id: str,
        day: date,
        entries: Sequence[AttendanceEntry],
        now: Optional[datetime] = None,
    ) -> int:
        """Write one record per student for `day`; an existing record is updated in place."""

        self._check_editor(current_user)
        cls = self._require_class(class_id)
        if not entries:
            raise ValidationError("No students to record")

        roster = set(cls.students)
        outsiders = [e.student_id for e in entries if e.student_id not in roster]
        if outsiders:
            raise ValidationError("Some students are not enrolled in this class")

        # One record per student; the last row for a student wins.
        entries = list({e.student_id: e for e in entries}.values())

        existing = {r.student_id: r for r in self._attendance.list_for_class(class_id, day)}
        now = now or now_local()
        written = 0
        for entry in entries:
            status = self._parse_status(entry.status)
            notes = (entry.notes or "").strip() or None
            current = existing.get(entry.student_id)
            if current:
                self._attendance.update(current.attendance_id, status=status, notes=notes)
            else:
                self._attendance.create(
                    student_id=entry.student_id,
                    class_id=class_id,
                    day=day,
                    status=status,
                    notes=notes,
                    created_by=current_user.user_id,
                    created_at=now,
                )
            written += 1
        return written

    def update_record(self, *, current_user: User, attendance_id: str, status: str, notes: str = "") -> None:
        self._check_editor(current_user)
        if not self._attendance.get_by_id(attendance_id):
            raise NotFoundError("Attendance record not found")

        ok = self._attendance.update(
            attendance_id,
            status=self._parse_status(status),
            notes=(notes or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Updating the record failed")

    def delete_record(self, *, current_user: User, attendance_id: str) -> None:
        if not can_delete(current_user.role, "attendance"):
            raise AuthorizationError("You are not allowed to delete attendance")
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found")

    def list_for_class(self, class_id: str, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_class(class_id, day)

    def list_for_student(self, *, current_user: User, student_id: str) -> Sequence[AttendanceRecord]:
        if current_user.role == Role.STUDENT and current_user.user_id != student_id:
            raise AuthorizationError("You can only see your own attendance")
        return self._attendance.list_for_student(student_id)

    def student_summary(self, student_id: str) -> StudentSummary:
        records = self._attendance.list_for_student(student_id)
        counts = Counter(r.status for r in records)
        total = len(records)
        absent = counts[AttendanceStatus.ABSENT]
        # Justified absences do not lower the rate.
        rate = round((total - absent) / total * 100, 2) if total else 0.0
        return StudentSummary(
            total=total,
            present=counts[AttendanceStatus.PRESENT],
            absent=absent,
            justified=counts[AttendanceStatus.JUSTIFIED],
            presence_rate=rate,
        )
