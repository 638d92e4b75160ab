from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_hhmm
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role, SubstitutionStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import has_admin_access
from ..database.firestore_base import date_key
from ..notifications.service import NotificationService
from ..users.model import User
from ..users.repository import UserRepository
from .model import NewSubstitution, Substitution
from .repository import SubstitutionRepository

logger = logging.getLogger(__name__)

NOTIFY_ASSIGNED = "substitution_assigned"


class SubstitutionService:
    """Substitution requests (teacher side) and assignments (admin side)."""

    def __init__(
        self,
        substitutions: SubstitutionRepository,
        classes: ClassRepository,
        users: UserRepository,
        notifications: NotificationService,
    ):
        self._subs = substitutions
        self._classes = classes
        self._users = users
        self._notifications = notifications

    @staticmethod
    def _parse_window(start_time: str, end_time: str):
        start = parse_hhmm(start_time, "Start time")
        end = parse_hhmm(end_time, "End time")
        if not start or not end:
            raise ValidationError("All fields are required")
        if end <= start:
            raise ValidationError("End time must be after start time")
        return start, end

    def _record_history(self, action: str, substitution_id: str, sub: NewSubstitution, now: datetime) -> None:
        try:
            self._subs.add_history(
                {
                    "substitutionId": substitution_id,
                    "action": action,
                    "teacherId": sub.teacher_id,
                    "teacherName": sub.teacher_name,
                    "classId": sub.class_id,
                    "className": sub.class_name,
                    "date": date_key(sub.date),
                    "status": sub.status.value,
                    "createdAt": now,
                }
            )
        except Exception:
            logger.warning("Failed to write substitution history for %s", substitution_id, exc_info=True)

    def _require_teacher(self, teacher_id: str, *, substitute: bool = False) -> User:
        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise ValidationError("Selected user is not a teacher")
        if substitute and not teacher.available_for_substitution:
            raise ValidationError(f"{teacher.display_name} is not available for substitutions")
        return teacher

    def _require(self, substitution_id: str) -> Substitution:
        sub = self._subs.get_by_id(substitution_id)
        if not sub:
            raise NotFoundError("Substitution not found")
        return sub

    def request(
        self,
        *,
        current_user: User,
        class_id: str,
        day: Optional[date],
        start_time: str,
        end_time: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> str:
        if current_user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can request a substitution")
        if not class_id or not day or not (reason or "").strip():
            raise ValidationError("All fields are required")

        start, end = self._parse_window(start_time, end_time)
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise NotFoundError("Class not found")

        original_name = None
        if cls.teacher_id:
            original = self._users.get_by_id(cls.teacher_id)
            original_name = original.display_name if original else None

        now = now or now_local()
        sub = NewSubstitution(
            teacher_id=current_user.user_id,
            teacher_name=current_user.display_name,
            class_id=cls.class_id,
            class_name=cls.name,
            date=day,
            start_time=start,
            end_time=end,
            reason=reason.strip(),
            status=SubstitutionStatus.PENDING,
            original_teacher_id=cls.teacher_id,
            original_teacher_name=original_name,
        )
        substitution_id = self._subs.create(sub, created_at=now)
        self._record_history("created", substitution_id, sub, now)
        return substitution_id

    def assign(
        self,
        *,
        current_role: Role,
        original_teacher_id: str,
        substitute_teacher_id: str,
        class_id: str,
        day: Optional[date],
        start_time: str,
        end_time: str,
        reason: str = "",
        now: Optional[datetime] = None,
    ) -> str:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to assign substitutions")
        if not class_id or not day or not substitute_teacher_id:
            raise ValidationError("Class, date and substitute are required")
        if substitute_teacher_id == original_teacher_id:
            raise ValidationError("The substitute must be a different teacher")

        start, end = self._parse_window(start_time, end_time)
        original = self._require_teacher(original_teacher_id)
        substitute = self._require_teacher(substitute_teacher_id, substitute=True)
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise NotFoundError("Class not found")

        now = now or now_local()
        sub = NewSubstitution(
            teacher_id=substitute.user_id,
            teacher_name=substitute.display_name,
            class_id=cls.class_id,
            class_name=cls.name,
            date=day,
            start_time=start,
            end_time=end,
            reason=(reason or "").strip(),
            status=SubstitutionStatus.ASSIGNED,
            original_teacher_id=original.user_id,
            original_teacher_name=original.display_name,
        )
        substitution_id = self._subs.create(sub, created_at=now)
        self._record_history("assigned", substitution_id, sub, now)

        # Only the substitute is notified.
        try:
            self._notifications.notify(
                recipient_id=substitute.user_id,
                type=NOTIFY_ASSIGNED,
                title="You have been assigned a substitution",
                message=f"{cls.name} • {day.strftime('%d %b %Y')} {start:%H:%M}-{end:%H:%M}",
                substitution_id=substitution_id,
                class_id=cls.class_id,
                now=now,
            )
        except Exception:
            logger.warning("Failed to notify %s about substitution %s", substitute.user_id, substitution_id, exc_info=True)

        return substitution_id

    def _decide(
        self,
        *,
        current_role: Role,
        admin_user_id: str,
        substitution_id: str,
        status: SubstitutionStatus,
        notes: str,
        now: Optional[datetime],
    ) -> None:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to review substitutions")

        sub = self._require(substitution_id)
        if sub.status != SubstitutionStatus.PENDING:
            raise ValidationError("This request has already been processed")

        ok = self._subs.set_status(
            substitution_id,
            status=status,
            updated_at=now or now_local(),
            approved_by=admin_user_id if status == SubstitutionStatus.APPROVED else None,
            notes=(notes or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Updating the request failed")

    def approve(
        self,
        *,
        current_role: Role,
        admin_user_id: str,
        substitution_id: str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            substitution_id=substitution_id,
            status=SubstitutionStatus.APPROVED,
            notes=notes,
            now=now,
        )

    def reject(
        self,
        *,
        current_role: Role,
        admin_user_id: str,
        substitution_id: str,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        self._decide(
            current_role=current_role,
            admin_user_id=admin_user_id,
            substitution_id=substitution_id,
            status=SubstitutionStatus.REJECTED,
            notes=notes,
            now=now,
        )

    def complete(self, *, current_user: User, substitution_id: str, now: Optional[datetime] = None) -> None:
        sub = self._require(substitution_id)
        if sub.teacher_id != current_user.user_id and not has_admin_access(current_user.role):
            raise AuthorizationError("You are not allowed to complete this substitution")
        if sub.status not in (SubstitutionStatus.ASSIGNED, SubstitutionStatus.APPROVED):
            raise ValidationError("Only assigned or approved substitutions can be completed")

        self._subs.set_status(substitution_id, status=SubstitutionStatus.COMPLETED, updated_at=now or now_local())

    def list_for_teacher(self, teacher_id: str) -> Sequence[Substitution]:
        return self._subs.list_for_teacher(teacher_id)

    def list_pending(self) -> Sequence[Substitution]:
        return self._subs.list_by_status(SubstitutionStatus.PENDING)

    def history(self, *, today: date, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[Substitution]:
        return list(self._subs.list_before(today))[:limit]
