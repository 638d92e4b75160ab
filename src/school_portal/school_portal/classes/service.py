from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..action_logs.model import Actor
from ..action_logs.service import ActionLogger
from ..common.validators import require_non_empty
from ..core.enums import ActionType, Role, SubstitutionStatus, Turno
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_create, can_delete, can_edit
from ..substitutions.repository import SubstitutionRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import SchoolClass
from .repository import ClassRepository

ACTIVE_SUBSTITUTION = (SubstitutionStatus.ASSIGNED, SubstitutionStatus.APPROVED)


class ClassService:
    """Use case: class rosters and teacher assignment."""

    def __init__(
        self,
        classes: ClassRepository,
        users: UserRepository,
        substitutions: Optional[SubstitutionRepository] = None,
        action_logger: Optional[ActionLogger] = None,
    ):
        self._classes = classes
        self._users = users
        self._substitutions = substitutions
        self._action_logger = action_logger

    def _log(self, actor: Optional[Actor], action: ActionType, cls: SchoolClass, **details) -> None:
        if self._action_logger:
            self._action_logger.log_action(
                actor,
                action,
                target_type="class",
                target_id=cls.class_id,
                target_name=cls.name,
                details=details or None,
            )

    def _require(self, class_id: str) -> SchoolClass:
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise NotFoundError("Class not found")
        return cls

    def _require_teacher(self, teacher_id: str) -> User:
        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise ValidationError("Selected user is not a teacher")
        return teacher

    @staticmethod
    def _parse_turno(turno: Optional[str]) -> Optional[Turno]:
        if not turno:
            return None
        try:
            return Turno(turno)
        except ValueError:
            raise ValidationError("Invalid time slot")

    def create_class(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        name: str,
        description: str = "",
        turno: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> str:
        if not can_create(current_role, "classes"):
            raise AuthorizationError("You are not allowed to create classes")

        name = require_non_empty(name, "Class name")
        parsed_turno = self._parse_turno(turno)
        if teacher_id:
            self._require_teacher(teacher_id)

        class_id = self._classes.create(
            name=name,
            description=(description or "").strip(),
            turno=parsed_turno,
            teacher_id=teacher_id or None,
        )
        if teacher_id:
            self._users.update_fields(teacher_id, {"assigned_class_id": class_id})

        self._log(actor, ActionType.CLASS_CREATED, SchoolClass(class_id=class_id, name=name))
        return class_id

    def update_class(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        class_id: str,
        name: str,
        description: str = "",
        turno: Optional[str] = None,
    ) -> None:
        if not can_edit(current_role, "classes"):
            raise AuthorizationError("You are not allowed to edit classes")

        cls = self._require(class_id)
        self._classes.update(
            class_id,
            {
                "name": require_non_empty(name, "Class name"),
                "description": (description or "").strip(),
                "turno": self._parse_turno(turno),
            },
        )
        self._log(actor, ActionType.CLASS_UPDATED, cls)

    def delete_class(self, *, actor: Optional[Actor], current_role: Role, class_id: str) -> None:
        if not can_delete(current_role, "classes"):
            raise AuthorizationError("You are not allowed to delete classes")

        cls = self._require(class_id)
        if not self._classes.delete(class_id):
            raise ValidationError("Deleting the class failed")

        if cls.teacher_id:
            self._users.update_fields(cls.teacher_id, {"assigned_class_id": None})
        self._log(actor, ActionType.CLASS_DELETED, cls)

    def assign_teacher(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        class_id: str,
        teacher_id: Optional[str],
    ) -> None:
        """Assign (or with `teacher_id=None` unassign) the class teacher."""

        if current_role not in (Role.ADMIN, Role.OPERATORE):
            raise AuthorizationError("You are not allowed to assign teachers")

        cls = self._require(class_id)
        if teacher_id:
            self._require_teacher(teacher_id)

        if cls.teacher_id and cls.teacher_id != teacher_id:
            self._users.update_fields(cls.teacher_id, {"assigned_class_id": None})

        self._classes.update(class_id, {"teacher_id": teacher_id or None})
        if teacher_id:
            self._users.update_fields(teacher_id, {"assigned_class_id": class_id})
            self._log(actor, ActionType.CLASS_ASSIGNED, cls, teacher_id=teacher_id)
        else:
            self._log(actor, ActionType.CLASS_UNASSIGNED, cls, teacher_id=cls.teacher_id)

    def set_students(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        class_id: str,
        student_ids: Sequence[str],
    ) -> None:
        if not can_edit(current_role, "classes") or current_role == Role.TEACHER:
            raise AuthorizationError("You are not allowed to change rosters")

        cls = self._require(class_id)
        students = self._users.get_many(student_ids)
        found = {s.user_id for s in students if s.role == Role.STUDENT}
        missing = [sid for sid in student_ids if sid not in found]
        if missing:
            raise ValidationError("Some selected users are not students")

        previous = set(cls.students)
        self._classes.set_students(class_id, list(student_ids))

        for sid in found - previous:
            self._users.update_fields(sid, {"class_id": class_id})
        for sid in previous - found:
            self._users.update_fields(sid, {"class_id": None})

        self._log(actor, ActionType.CLASS_UPDATED, cls, roster_size=len(found))

    def add_student(self, *, actor: Optional[Actor], current_role: Role, class_id: str, student_id: str) -> None:
        cls = self._require(class_id)
        if student_id in cls.students:
            raise ValidationError("Student is already in this class")
        self.set_students(
            actor=actor,
            current_role=current_role,
            class_id=class_id,
            student_ids=[*cls.students, student_id],
        )

    def remove_student(self, *, actor: Optional[Actor], current_role: Role, class_id: str, student_id: str) -> None:
        cls = self._require(class_id)
        if student_id not in cls.students:
            raise ValidationError("Student is not in this class")
        self.set_students(
            actor=actor,
            current_role=current_role,
            class_id=class_id,
            student_ids=[s for s in cls.students if s != student_id],
        )

    def get(self, class_id: str) -> SchoolClass:
        return self._require(class_id)

    def list_classes(self) -> Sequence[SchoolClass]:
        return self._classes.list_all()

    def get_roster(self, class_id: str) -> Sequence[User]:
        cls = self._require(class_id)
        students = list(self._users.get_many(cls.students))
        students.sort(key=lambda u: u.display_name.lower())
        return students

    def classes_for_teacher(self, teacher_id: str, *, today: date) -> Sequence[SchoolClass]:
        """Own classes plus classes covered today through a substitution."""

        merged: dict[str, SchoolClass] = {c.class_id: c for c in self._classes.list_for_teacher(teacher_id)}

        if self._substitutions:
            subs = self._substitutions.list_for_teacher_on(teacher_id, today, ACTIVE_SUBSTITUTION)
            temp_ids = [s.class_id for s in subs if s.class_id not in merged]
            for cls in self._classes.get_many(temp_ids):
                merged[cls.class_id] = cls.as_temporary()

        return sorted(merged.values(), key=lambda c: (c.is_temporary, c.name.lower()))

    def classes_for_user(self, user: User, *, today: date) -> Sequence[SchoolClass]:
        if user.role in (Role.ADMIN, Role.OPERATORE):
            return self.list_classes()
        if user.role == Role.TEACHER:
            return self.classes_for_teacher(user.user_id, today=today)
        if user.role == Role.PARENT:
            class_ids = [c.class_id for c in self._users.list_children(user.user_id) if c.class_id]
            return sorted(self._classes.get_many(class_ids), key=lambda c: c.name.lower())
        if user.class_id:
            cls = self._classes.get_by_id(user.class_id)
            return [cls] if cls else []
        return []
