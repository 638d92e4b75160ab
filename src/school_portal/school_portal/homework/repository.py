from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Homework, HomeworkSubmission


class HomeworkRepository(Protocol):
    def get_by_id(self, homework_id: str) -> Optional[Homework]:
        raise NotImplementedError

    def get_many(self, homework_ids: Sequence[str]) -> Sequence[Homework]:
        raise NotImplementedError

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[Homework]:
        """Sorted by due date, soonest first."""

        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def delete(self, homework_id: str) -> bool:
        raise NotImplementedError


class SubmissionRepository(Protocol):
    def get_by_id(self, submission_id: str) -> Optional[HomeworkSubmission]:
        raise NotImplementedError

    def get_for_student(self, homework_id: str, student_id: str) -> Optional[HomeworkSubmission]:
        raise NotImplementedError

    def list_for_homework(self, homework_id: str) -> Sequence[HomeworkSubmission]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[HomeworkSubmission]:
        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def set_grade(
        self,
        submission_id: str,
        *,
        grade: float,
        feedback: Optional[str],
        graded_by: str,
        graded_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete_for_homework(self, homework_id: str) -> int:
        raise NotImplementedError
