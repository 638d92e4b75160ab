from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import HomeworkStatus, SubmissionStatus


@dataclass(frozen=True)
class Homework:
    homework_id: str
    title: str
    description: str
    class_id: str
    due_date: date
    created_by: str
    created_at: datetime
    status: HomeworkStatus = HomeworkStatus.ACTIVE
    class_name: Optional[str] = None
    lesson_id: Optional[str] = None
    teacher_name: Optional[str] = None
    attachment_urls: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class HomeworkSubmission:
    submission_id: str
    homework_id: str
    student_id: str
    student_name: str
    submitted_at: datetime
    status: SubmissionStatus = SubmissionStatus.SUBMITTED
    submission_urls: tuple[str, ...] = field(default_factory=tuple)
    submission_text: Optional[str] = None
    grade: Optional[float] = None
    feedback: Optional[str] = None
    graded_by: Optional[str] = None
    graded_at: Optional[datetime] = None

    @property
    def is_graded(self) -> bool:
        return self.status == SubmissionStatus.GRADED
