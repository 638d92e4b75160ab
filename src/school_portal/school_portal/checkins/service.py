from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.repository import UserRepository
from .factory import CheckInStrategyFactory
from .model import TeacherCheckIn
from .repository import CheckInRepository
from .strategies.base import StatusDecision


class CheckInService:
    def __init__(
        self,
        checkins: CheckInRepository,
        users: UserRepository,
        classes: ClassRepository,
        *,
        strategy_factory: CheckInStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    ):
        self._checkins = checkins
        self._users = users
        self._classes = classes
        self._factory = strategy_factory or CheckInStrategyFactory()
        self._grace_minutes = int(grace_minutes)

    def check_in(self, teacher_id: str, *, now: datetime | None = None, location: Optional[str] = None) -> str:
        now = now or datetime.now()
        today = now.date()

        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can check in")
        if not teacher.assigned_class_id:
            raise ValidationError("You have no assigned class")

        cls = self._classes.get_by_id(teacher.assigned_class_id)
        if not cls:
            raise ValidationError("Your assigned class no longer exists")

        if self._checkins.get_for_teacher_on(teacher_id, today):
            raise ValidationError("You have already checked in today")

        strategy = self._factory.for_checkin(now=now, today=today, turno=cls.turno, grace_minutes=self._grace_minutes)
        decision = strategy.decide_checkin(now=now, today=today, turno=cls.turno, grace_minutes=self._grace_minutes)

        return self._checkins.create(
            teacher_id=teacher_id,
            teacher_name=teacher.display_name,
            class_id=cls.class_id,
            class_name=cls.name,
            check_in_time=now,
            status=decision.status,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            location=(location or "").strip() or None,
        )

    def check_out(self, teacher_id: str, *, now: datetime | None = None) -> None:
        now = now or datetime.now()

        record = self._checkins.get_for_teacher_on(teacher_id, now.date())
        if not record:
            raise ValidationError("You have not checked in today")
        if record.check_out_time is not None:
            raise ValidationError("You have already checked out")

        current = StatusDecision(status=record.status, is_late=record.is_late, late_minutes=record.late_minutes)
        decision = self._factory.for_checkout().decide_checkout(now=now, current=current)

        ok = self._checkins.update_checkout(record.checkin_id, check_out_time=now, status=decision.status)
        if not ok:
            raise ValidationError("Check-out failed")

    def today(self, teacher_id: str, today: date) -> Optional[TeacherCheckIn]:
        return self._checkins.get_for_teacher_on(teacher_id, today)

    def history(self, teacher_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[TeacherCheckIn]:
        return self._checkins.list_for_teacher(teacher_id, limit=limit)
