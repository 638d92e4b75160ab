from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TeacherStatsRow:
    """Read-model: one teacher's attendance for a month."""

    teacher_id: str
    teacher_name: str
    period: str
    total_scheduled_lessons: int
    attended_lessons: int
    missed_lessons: int
    late_arrivals: int
    attendance_rate: float
    average_late_minutes: float


@dataclass(frozen=True)
class OverallStats:
    total_teachers: int
    average_attendance_rate: float
    total_lessons: int
    total_missed_lessons: int
    teachers_with_perfect_attendance: int
    teachers_with_low_attendance: int


@dataclass(frozen=True)
class StatsReport:
    period: str
    rows: list[TeacherStatsRow]
    overall: OverallStats
