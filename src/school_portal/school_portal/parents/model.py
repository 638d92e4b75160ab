from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord, StudentSummary
from ..classes.model import SchoolClass
from ..fees.model import FamilyAccount
from ..homework.model import Homework, HomeworkSubmission
from ..lessons.model import Lesson
from ..users.model import User


@dataclass(frozen=True)
class HomeworkProgress:
    homework: Homework
    submission: Optional[HomeworkSubmission] = None

    @property
    def grade(self) -> Optional[float]:
        if self.submission and self.submission.is_graded:
            return self.submission.grade
        return None

    def state(self, today: date) -> str:
        if self.submission:
            return "graded" if self.submission.is_graded else "submitted"
        return "overdue" if self.homework.due_date < today else "to do"


@dataclass(frozen=True)
class ChildOverview:
    """Read-model: everything a parent sees about one child."""

    child: User
    school_class: Optional[SchoolClass]
    homework: list[HomeworkProgress]
    lessons: list[Lesson]
    attendance: list[AttendanceRecord]
    summary: StudentSummary
    family: Optional[FamilyAccount] = None

    @property
    def grades(self) -> list[HomeworkProgress]:
        return [h for h in self.homework if h.grade is not None]

    @property
    def average_grade(self) -> Optional[float]:
        grades = [h.grade for h in self.grades]
        return round(sum(grades) / len(grades), 2) if grades else None
