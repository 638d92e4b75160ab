from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_min_length
from ..core.constants import MAX_GRADE, MIN_GRADE
from ..core.enums import HomeworkStatus, Role, SubmissionStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_create, can_delete, can_edit
from ..database.firestore_base import compact, date_key
from ..users.model import User
from .model import Homework, HomeworkSubmission
from .repository import HomeworkRepository, SubmissionRepository

logger = logging.getLogger(__name__)


def _clean_urls(urls: Optional[Sequence[str]]) -> list[str]:
    return [u.strip() for u in (urls or []) if u and u.strip()]


class HomeworkService:
    """Homework assignments, student submissions and grading."""

    def __init__(self, homework: HomeworkRepository, submissions: SubmissionRepository, classes: ClassRepository):
        self._homework = homework
        self._submissions = submissions
        self._classes = classes

    def _require(self, homework_id: str) -> Homework:
        hw = self._homework.get_by_id(homework_id)
        if not hw:
            raise NotFoundError("Homework not found")
        return hw

    def create_homework(
        self,
        *,
        current_user: User,
        title: str,
        description: str,
        class_id: str,
        due_date: Optional[date],
        lesson_id: Optional[str] = None,
        attachment_urls: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> str:
        if not can_create(current_user.role, "homework"):
            raise AuthorizationError("You are not allowed to create homework")

        title = require_min_length(title, "Title", 3)
        description = require_min_length(description, "Description", 10)
        if not due_date:
            raise ValidationError("Due date is required")

        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise NotFoundError("Class not found")

        data = {
            "title": title,
            "description": description,
            "classId": cls.class_id,
            "className": cls.name,
            "lessonId": lesson_id or None,
            "dueDate": date_key(due_date),
            "attachmentUrls": _clean_urls(attachment_urls),
            "createdBy": current_user.user_id,
            "teacherName": current_user.display_name,
            "status": HomeworkStatus.ACTIVE.value,
            "createdAt": now or now_local(),
        }
        return self._homework.create(compact(data))

    def delete_homework(self, *, current_user: User, homework_id: str) -> None:
        if not can_delete(current_user.role, "homework"):
            raise AuthorizationError("You are not allowed to delete homework")

        hw = self._require(homework_id)
        if current_user.role == Role.TEACHER and hw.created_by != current_user.user_id:
            raise AuthorizationError("You can only delete your own homework")

        removed = self._submissions.delete_for_homework(homework_id)
        self._homework.delete(homework_id)
        logger.info("Deleted homework %s with %d submissions", homework_id, removed)

    def get(self, homework_id: str) -> Homework:
        return self._require(homework_id)

    def list_for_class(self, class_id: str) -> Sequence[Homework]:
        return self._homework.list_for_classes([class_id])

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[Homework]:
        return self._homework.list_for_classes(class_ids)

    def list_for_student(self, student: User) -> Sequence[Homework]:
        if not student.class_id:
            return []
        return self._homework.list_for_classes([student.class_id])

    def submit(
        self,
        *,
        student: User,
        homework_id: str,
        text: str = "",
        urls: Optional[Sequence[str]] = None,
        now: Optional[datetime] = None,
    ) -> str:
        if student.role != Role.STUDENT:
            raise AuthorizationError("Only students can submit homework")

        hw = self._require(homework_id)
        cls = self._classes.get_by_id(hw.class_id)
        if not cls or student.user_id not in cls.students:
            raise AuthorizationError("You are not enrolled in this class")

        text = (text or "").strip()
        files = _clean_urls(urls)
        if not text and not files:
            raise ValidationError("Add a text answer or at least one file")

        if self._submissions.get_for_student(homework_id, student.user_id):
            raise ValidationError("You have already submitted this homework")

        data = {
            "homeworkId": homework_id,
            "studentId": student.user_id,
            "studentName": student.display_name,
            "submissionUrls": files,
            "submissionText": text or None,
            "submittedAt": now or now_local(),
            "status": SubmissionStatus.SUBMITTED.value,
        }
        return self._submissions.create(compact(data))

    def grade(
        self,
        *,
        current_user: User,
        submission_id: str,
        grade,
        feedback: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        if not can_edit(current_user.role, "grades"):
            raise AuthorizationError("You are not allowed to grade homework")

        try:
            value = float(grade)
        except (TypeError, ValueError):
            raise ValidationError("Grade must be a number")
        if not MIN_GRADE <= value <= MAX_GRADE:
            raise ValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE}")

        submission = self._submissions.get_by_id(submission_id)
        if not submission:
            raise NotFoundError("Submission not found")

        if current_user.role == Role.TEACHER:
            hw = self._require(submission.homework_id)
            cls = self._classes.get_by_id(hw.class_id)
            if hw.created_by != current_user.user_id and (not cls or cls.teacher_id != current_user.user_id):
                raise AuthorizationError("You can only grade homework of your classes")

        self._submissions.set_grade(
            submission_id,
            grade=value,
            feedback=(feedback or "").strip() or None,
            graded_by=current_user.user_id,
            graded_at=now or now_local(),
        )

    def list_submissions(self, homework_id: str) -> Sequence[HomeworkSubmission]:
        self._require(homework_id)
        return self._submissions.list_for_homework(homework_id)

    def submissions_by_student(self, student_id: str) -> dict[str, HomeworkSubmission]:
        return {s.homework_id: s for s in self._submissions.list_for_student(student_id)}
