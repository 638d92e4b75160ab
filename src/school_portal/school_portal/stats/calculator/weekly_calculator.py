from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ...checkins.model import TeacherCheckIn
from ...common.datetime_utils import iter_days
from ...core.enums import Turno
from .base import AttendanceCalculator


class WeeklyAttendanceCalculator(AttendanceCalculator):
    """One lesson per week, on the weekday of the class slot."""

    def scheduled_lessons(self, turno: Optional[Turno], *, start: date, end: date) -> int:
        if turno is None:
            return 0
        return sum(1 for d in iter_days(start, end) if d.weekday() == turno.weekday)

    def attended_lessons(self, checkins: Sequence[TeacherCheckIn]) -> int:
        return sum(1 for c in checkins if c.counts_as_attended)

    def late_arrivals(self, checkins: Sequence[TeacherCheckIn]) -> int:
        return sum(1 for c in checkins if c.counts_as_late)

    def average_late_minutes(self, checkins: Sequence[TeacherCheckIn]) -> float:
        minutes = [c.late_minutes for c in checkins if c.is_late and c.late_minutes]
        if not minutes:
            return 0.0
        return round(sum(minutes) / len(minutes), 2)
