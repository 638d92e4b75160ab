from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ...core.enums import CheckInStatus, Turno


@dataclass(frozen=True)
class StatusDecision:
    status: CheckInStatus
    is_late: bool = False
    late_minutes: Optional[int] = None


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a teacher check-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, today: date, turno: Optional[Turno], grace_minutes: int) -> StatusDecision:
        raise NotImplementedError

    def decide_checkout(self, *, now: datetime, current: StatusDecision) -> StatusDecision:
        # Check-out keeps the lateness recorded at check-in.
        return StatusDecision(
            status=CheckInStatus.CHECKED_OUT,
            is_late=current.is_late,
            late_minutes=current.late_minutes,
        )
