from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CheckInStatus


@dataclass(frozen=True)
class TeacherCheckIn:
    """Domain entity: a teacher's presence at a lesson."""

    checkin_id: str
    teacher_id: str
    teacher_name: str
    class_id: str
    class_name: str
    check_in_time: datetime
    status: CheckInStatus
    check_out_time: Optional[datetime] = None
    is_late: bool = False
    late_minutes: Optional[int] = None
    scheduled_lesson_id: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def counts_as_attended(self) -> bool:
        return self.status in (CheckInStatus.CHECKED_IN, CheckInStatus.CHECKED_OUT, CheckInStatus.LATE)

    @property
    def counts_as_late(self) -> bool:
        return self.status == CheckInStatus.LATE or self.is_late
