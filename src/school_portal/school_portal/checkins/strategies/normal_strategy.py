from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import CheckInStatus, Turno
from .base import CheckInStrategy, StatusDecision


class NormalStrategy(CheckInStrategy):
    """On-time check-in."""

    def decide_checkin(self, *, now: datetime, today: date, turno: Optional[Turno], grace_minutes: int) -> StatusDecision:
        return StatusDecision(status=CheckInStatus.CHECKED_IN)
