from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import FeePayment, Receipt


class FeePaymentRepository(Protocol):
    def get_by_id(self, payment_id: str) -> Optional[FeePayment]:
        raise NotImplementedError

    def list_all(self) -> Sequence[FeePayment]:
        """Newest first."""

        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def update(self, payment_id: str, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, payment_id: str) -> bool:
        raise NotImplementedError


class ReceiptRepository(Protocol):
    def get_by_id(self, receipt_id: str) -> Optional[Receipt]:
        raise NotImplementedError

    def get_for_payment(self, payment_id: str) -> Optional[Receipt]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Receipt]:
        """Newest first."""

        raise NotImplementedError

    def numbers_for_year(self, year: int) -> Sequence[str]:
        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def update(self, receipt_id: str, data: dict) -> bool:
        raise NotImplementedError

    def delete(self, receipt_id: str) -> bool:
        raise NotImplementedError
