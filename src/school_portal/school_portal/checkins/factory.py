from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.enums import Turno
from .strategies.base import CheckInStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class CheckInStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the class time slot."""

    def for_checkin(self, *, now: datetime, today: date, turno: Optional[Turno], grace_minutes: int) -> CheckInStrategy:
        # No slot, or no lesson on this weekday: nothing to be late for.
        if not turno or today.weekday() != turno.weekday:
            return NormalStrategy()

        start = datetime.combine(today, turno.start_time)
        if now <= start + timedelta(minutes=grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self) -> CheckInStrategy:
        return NormalStrategy()
