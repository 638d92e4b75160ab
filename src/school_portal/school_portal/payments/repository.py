from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import TeacherPayment


class PaymentRepository(Protocol):
    def get_by_id(self, payment_id: str) -> Optional[TeacherPayment]:
        raise NotImplementedError

    def list_payments(self, *, month: Optional[str] = None, teacher_id: Optional[str] = None) -> Sequence[TeacherPayment]:
        """Newest first."""

        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def update(self, payment_id: str, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, payment_id: str) -> bool:
        raise NotImplementedError
