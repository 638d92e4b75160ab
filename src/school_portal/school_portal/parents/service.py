from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.service import AttendanceService
from ..classes.repository import ClassRepository
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..fees.service import FeeService
from ..homework.service import HomeworkService
from ..lessons.service import LessonService
from ..users.model import User
from ..users.repository import UserRepository
from .model import ChildOverview, HomeworkProgress


class ParentPortalService:
    """Read-only views of a parent's linked children.

    Note: reuses the homework, lesson, attendance and fee use cases; a parent
    never writes anything through here.
    """

    def __init__(
        self,
        users: UserRepository,
        classes: ClassRepository,
        homework: HomeworkService,
        lessons: LessonService,
        attendance: AttendanceService,
        fees: Optional[FeeService] = None,
    ):
        self._users = users
        self._classes = classes
        self._homework = homework
        self._lessons = lessons
        self._attendance = attendance
        self._fees = fees

    @staticmethod
    def _check_parent(parent: User) -> None:
        if parent.role != Role.PARENT:
            raise AuthorizationError("Only parents can open the parent area")

    def children(self, parent: User) -> Sequence[User]:
        self._check_parent(parent)
        return self._users.list_children(parent.user_id)

    def _require_child(self, parent: User, child_id: str) -> User:
        child = self._users.get_by_id(child_id)
        if not child or child.role != Role.STUDENT:
            raise NotFoundError("Student not found")
        if child.parent_id != parent.user_id:
            raise AuthorizationError("This student is not linked to your account")
        return child

    def child_overview(self, parent: User, child_id: str) -> ChildOverview:
        self._check_parent(parent)
        child = self._require_child(parent, child_id)

        school_class = self._classes.get_by_id(child.class_id) if child.class_id else None
        submissions = self._homework.submissions_by_student(child.user_id)
        homework = [
            HomeworkProgress(homework=hw, submission=submissions.get(hw.homework_id))
            for hw in self._homework.list_for_student(child)
        ]
        lessons = list(self._lessons.list_for_class(child.class_id)) if child.class_id else []

        return ChildOverview(
            child=child,
            school_class=school_class,
            homework=homework,
            lessons=lessons,
            attendance=list(self._attendance.list_for_student(current_user=parent, student_id=child.user_id)),
            summary=self._attendance.student_summary(child.user_id),
            family=self._fees.account_for_parent(parent) if self._fees else None,
        )

    def pending_homework(self, parent: User) -> int:
        """Homework not yet handed in across all children, for the dashboard."""

        count = 0
        for child in self.children(parent):
            submitted = self._homework.submissions_by_student(child.user_id)
            count += sum(1 for hw in self._homework.list_for_student(child) if hw.homework_id not in submitted)
        return count
