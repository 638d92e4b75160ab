from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

from ...checkins.model import TeacherCheckIn
from ...core.enums import Turno


class AttendanceCalculator(ABC):
    """Calculator interface (Strategy Pattern for teacher attendance)."""

    @abstractmethod
    def scheduled_lessons(self, turno: Optional[Turno], *, start: date, end: date) -> int:
        raise NotImplementedError

    @abstractmethod
    def attended_lessons(self, checkins: Sequence[TeacherCheckIn]) -> int:
        raise NotImplementedError

    @abstractmethod
    def late_arrivals(self, checkins: Sequence[TeacherCheckIn]) -> int:
        raise NotImplementedError

    @abstractmethod
    def average_late_minutes(self, checkins: Sequence[TeacherCheckIn]) -> float:
        raise NotImplementedError
