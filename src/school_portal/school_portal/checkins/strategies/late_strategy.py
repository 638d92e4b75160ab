from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import CheckInStatus, Turno
from .base import CheckInStrategy, StatusDecision


class LateStrategy(CheckInStrategy):
    """Late check-in; minutes are counted from the slot start, not from the end of the grace window."""

    def decide_checkin(self, *, now: datetime, today: date, turno: Optional[Turno], grace_minutes: int) -> StatusDecision:
        minutes = None
        if turno is not None:
            start = datetime.combine(today, turno.start_time)
            minutes = max(0, int((now - start).total_seconds() // 60))
        return StatusDecision(status=CheckInStatus.LATE, is_late=True, late_minutes=minutes)
