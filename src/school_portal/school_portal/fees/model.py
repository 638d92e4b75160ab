from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import FeeStatus
from ..users.model import User


@dataclass(frozen=True)
class FeePayment:
    """Money a family paid towards the yearly fee.

    Note: families have no document of their own; payments are tied to the
    `parentContact` shared by the children.
    """

    payment_id: str
    parent_contact: str
    parent_name: str
    amount: float
    date: date
    created_by: str
    created_at: datetime
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Receipt:
    receipt_id: str
    receipt_number: str
    payment_id: str
    parent_contact: str
    parent_name: str
    amount: float
    date: date
    created_by: str
    created_at: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class FamilyAccount:
    """Read-model: enrolled children grouped by parent contact, with what is owed and paid."""

    parent_contact: str
    parent_name: str
    children: tuple[User, ...]
    total_amount: float
    paid_amount: float
    is_exempted: bool = False
    payments: tuple[FeePayment, ...] = field(default_factory=tuple)

    @property
    def remaining(self) -> float:
        if self.is_exempted:
            return 0.0
        return round(max(0.0, self.total_amount - self.paid_amount), 2)

    @property
    def status(self) -> FeeStatus:
        if self.is_exempted:
            return FeeStatus.EXEMPTED
        if self.paid_amount >= self.total_amount:
            return FeeStatus.PAID
        if self.paid_amount > 0:
            return FeeStatus.PARTIAL
        return FeeStatus.UNPAID
