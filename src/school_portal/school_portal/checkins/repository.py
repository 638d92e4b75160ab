from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckInStatus
from .model import TeacherCheckIn


class CheckInRepository(Protocol):
    def get_for_teacher_on(self, teacher_id: str, day: date) -> Optional[TeacherCheckIn]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str, *, limit: int) -> Sequence[TeacherCheckIn]:
        """Newest first."""

        raise NotImplementedError

    def list_between(self, start: datetime, end: datetime) -> Sequence[TeacherCheckIn]:
        """All check-ins with `start <= check_in_time < end`."""

        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: str,
        teacher_name: str,
        class_id: str,
        class_name: str,
        check_in_time: datetime,
        status: CheckInStatus,
        is_late: bool,
        late_minutes: Optional[int],
        location: Optional[str],
    ) -> str:
        raise NotImplementedError

    def update_checkout(self, checkin_id: str, *, check_out_time: datetime, status: CheckInStatus) -> bool:
        raise NotImplementedError
