from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_create, can_delete, can_edit
from ..database.firestore_base import date_key
from ..homework.repository import HomeworkRepository
from ..materials.repository import MaterialRepository
from ..users.model import User
from .model import Lesson, LessonDetails
from .repository import LessonRepository


def _parse_topics(topics) -> list[str]:
    if isinstance(topics, str):
        topics = topics.split(",")
    return [t.strip() for t in (topics or []) if t and t.strip()]


class LessonService:
    def __init__(
        self,
        lessons: LessonRepository,
        classes: ClassRepository,
        materials: MaterialRepository,
        homework: HomeworkRepository,
    ):
        self._lessons = lessons
        self._classes = classes
        self._materials = materials
        self._homework = homework

    def _require(self, lesson_id: str) -> Lesson:
        lesson = self._lessons.get_by_id(lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")
        return lesson

    @staticmethod
    def _check_owner(current_user: User, lesson: Lesson) -> None:
        if current_user.role == Role.TEACHER and lesson.created_by != current_user.user_id:
            raise AuthorizationError("You can only change your own lessons")

    def create_lesson(
        self,
        *,
        current_user: User,
        title: str,
        description: str,
        class_id: str,
        day: Optional[date],
        topics=None,
        now: Optional[datetime] = None,
    ) -> str:
        if not can_create(current_user.role, "lessons"):
            raise AuthorizationError("You are not allowed to create lessons")

        title = require_non_empty(title, "Title")
        if not day:
            raise ValidationError("Lesson date is required")
        if not self._classes.get_by_id(class_id):
            raise NotFoundError("Class not found")

        return self._lessons.create(
            {
                "title": title,
                "description": (description or "").strip(),
                "classId": class_id,
                "date": date_key(day),
                "topics": _parse_topics(topics),
                "materials": [],
                "homeworks": [],
                "createdBy": current_user.user_id,
                "teacherName": current_user.display_name,
                "createdAt": now or now_local(),
            }
        )

    def update_lesson(
        self,
        *,
        current_user: User,
        lesson_id: str,
        title: str,
        description: str,
        day: Optional[date],
        topics=None,
    ) -> None:
        if not can_edit(current_user.role, "lessons"):
            raise AuthorizationError("You are not allowed to edit lessons")

        lesson = self._require(lesson_id)
        self._check_owner(current_user, lesson)
        fields = {
            "title": require_non_empty(title, "Title"),
            "description": (description or "").strip(),
            "topics": _parse_topics(topics),
        }
        if day:
            fields["date"] = day
        self._lessons.update(lesson_id, fields)

    def delete_lesson(self, *, current_user: User, lesson_id: str) -> None:
        if not can_delete(current_user.role, "lessons"):
            raise AuthorizationError("You are not allowed to delete lessons")

        lesson = self._require(lesson_id)
        self._check_owner(current_user, lesson)
        self._lessons.delete(lesson_id)

    def list_for_class(self, class_id: str) -> Sequence[Lesson]:
        return self._lessons.list_for_class(class_id)

    def attach_material(self, *, current_user: User, lesson_id: str, material_id: str) -> None:
        if not can_edit(current_user.role, "lessons"):
            raise AuthorizationError("You are not allowed to edit lessons")

        lesson = self._require(lesson_id)
        material = self._materials.get_by_id(material_id)
        if not material:
            raise NotFoundError("Material not found")
        if material.class_id != lesson.class_id:
            raise ValidationError("The material belongs to another class")

        self._materials.update(material_id, {"lesson_id": lesson_id})
        self._lessons.add_link(lesson_id, "materials", material_id)

    def attach_homework(self, *, current_user: User, lesson_id: str, homework_id: str) -> None:
        if not can_edit(current_user.role, "lessons"):
            raise AuthorizationError("You are not allowed to edit lessons")

        lesson = self._require(lesson_id)
        hw = self._homework.get_by_id(homework_id)
        if not hw:
            raise NotFoundError("Homework not found")
        if hw.class_id != lesson.class_id:
            raise ValidationError("The homework belongs to another class")

        self._lessons.add_link(lesson_id, "homeworks", homework_id)

    def lesson_details(self, lesson_id: str) -> LessonDetails:
        lesson = self._require(lesson_id)
        return LessonDetails(
            lesson=lesson,
            materials=list(self._materials.get_many(lesson.materials)),
            homeworks=list(self._homework.get_many(lesson.homeworks)),
        )
