from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TeacherPaymentType


@dataclass(frozen=True)
class TeacherPayment:
    payment_id: str
    teacher_id: str
    teacher_name: str
    amount: float
    date: date
    month: str
    payment_type: TeacherPaymentType
    created_by: str
    created_at: datetime
    description: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class MonthlySummary:
    month: str
    total: float
    count: int
    by_teacher: dict[str, float]
    by_type: dict[str, float]
