from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..checkins.model import TeacherCheckIn
from ..checkins.repository import CheckInRepository
from ..classes.repository import ClassRepository
from ..common.datetime_utils import month_bounds
from ..common.validators import require_month
from ..core.constants import LOW_ATTENDANCE_RATE
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.repository import UserRepository
from .calculator.base import AttendanceCalculator
from .calculator.weekly_calculator import WeeklyAttendanceCalculator
from .model import OverallStats, StatsReport, TeacherStatsRow

SORT_KEYS = {
    "name": lambda r: r.teacher_name.lower(),
    "attendance_rate": lambda r: r.attendance_rate,
    "total_lessons": lambda r: r.total_scheduled_lessons,
}

CSV_HEADERS = [
    "Teacher",
    "Scheduled lessons",
    "Attended lessons",
    "Missed lessons",
    "Late arrivals",
    "Attendance rate",
    "Average late minutes",
]


class TeacherAttendanceStatsService:
    def __init__(
        self,
        users: UserRepository,
        classes: ClassRepository,
        checkins: CheckInRepository,
        *,
        calculator: Optional[AttendanceCalculator] = None,
    ):
        self._users = users
        self._classes = classes
        self._checkins = checkins
        self._calculator = calculator or WeeklyAttendanceCalculator()

    def build(
        self,
        *,
        period: str,
        search: str = "",
        sort_by: str = "attendance_rate",
        descending: bool = True,
    ) -> StatsReport:
        period = require_month(period)
        if sort_by not in SORT_KEYS:
            raise ValidationError(f"Unknown sort key: {sort_by}")

        first, last = month_bounds(period)
        month_start = datetime.combine(first, datetime.min.time())
        month_end = month_start + timedelta(days=(last - first).days + 1)

        by_teacher: dict[str, list[TeacherCheckIn]] = defaultdict(list)
        for c in self._checkins.list_between(month_start, month_end):
            by_teacher[c.teacher_id].append(c)

        rows: list[TeacherStatsRow] = []
        for teacher in self._users.list_users(role=Role.TEACHER):
            own = self._classes.list_for_teacher(teacher.user_id)
            turno = own[0].turno if own else None
            scheduled = self._calculator.scheduled_lessons(turno, start=first, end=last)

            checkins = by_teacher.get(teacher.user_id, [])
            attended = self._calculator.attended_lessons(checkins)
            rate = round(attended / scheduled * 100, 2) if scheduled > 0 else 0.0

            rows.append(
                TeacherStatsRow(
                    teacher_id=teacher.user_id,
                    teacher_name=teacher.display_name,
                    period=period,
                    total_scheduled_lessons=scheduled,
                    attended_lessons=attended,
                    missed_lessons=max(0, scheduled - attended),
                    late_arrivals=self._calculator.late_arrivals(checkins),
                    attendance_rate=rate,
                    average_late_minutes=self._calculator.average_late_minutes(checkins),
                )
            )

        overall = self.overall(rows)
        return StatsReport(period=period, rows=self.filter_and_sort(rows, search, sort_by, descending), overall=overall)

    @staticmethod
    def overall(rows: Sequence[TeacherStatsRow]) -> OverallStats:
        """Aggregates are over every teacher, regardless of the name filter."""

        count = len(rows)
        average = sum(r.attendance_rate for r in rows) / count if count else 0.0
        return OverallStats(
            total_teachers=count,
            average_attendance_rate=round(average, 2),
            total_lessons=sum(r.total_scheduled_lessons for r in rows),
            total_missed_lessons=sum(r.missed_lessons for r in rows),
            teachers_with_perfect_attendance=sum(1 for r in rows if r.attendance_rate == 100),
            teachers_with_low_attendance=sum(1 for r in rows if r.attendance_rate < LOW_ATTENDANCE_RATE),
        )

    @staticmethod
    def filter_and_sort(
        rows: Sequence[TeacherStatsRow],
        search: str = "",
        sort_by: str = "attendance_rate",
        descending: bool = True,
    ) -> list[TeacherStatsRow]:
        needle = (search or "").strip().lower()
        out = [r for r in rows if needle in r.teacher_name.lower()]
        out.sort(key=SORT_KEYS[sort_by], reverse=descending)
        return out

    @staticmethod
    def csv_rows(rows: Sequence[TeacherStatsRow]) -> list[dict]:
        return [
            {
                "Teacher": r.teacher_name,
                "Scheduled lessons": r.total_scheduled_lessons,
                "Attended lessons": r.attended_lessons,
                "Missed lessons": r.missed_lessons,
                "Late arrivals": r.late_arrivals,
                "Attendance rate": f"{r.attendance_rate}%",
                "Average late minutes": r.average_late_minutes or 0,
            }
            for r in rows
        ]
