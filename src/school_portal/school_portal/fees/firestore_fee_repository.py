from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..database.firestore_base import as_date, as_datetime, snapshot_to_dict, stream_dicts
from .model import FeePayment, Receipt
from .repository import FeePaymentRepository, ReceiptRepository

PAYMENTS_COLLECTION = "paymentRecords"
RECEIPTS_COLLECTION = "receipts"


def fee_payment_from_doc(d: dict) -> FeePayment:
    return FeePayment(
        payment_id=d["id"],
        parent_contact=d.get("parentContact", ""),
        parent_name=d.get("parentName", ""),
        amount=float(d.get("amount") or 0),
        date=as_date(d.get("date")) or date.min,
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        notes=d.get("notes") or None,
        updated_at=as_datetime(d.get("updatedAt")),
    )


def receipt_from_doc(d: dict) -> Receipt:
    return Receipt(
        receipt_id=d["id"],
        receipt_number=d.get("receiptNumber", ""),
        payment_id=d.get("paymentRecordId", ""),
        parent_contact=d.get("parentContact", ""),
        parent_name=d.get("parentName", ""),
        amount=float(d.get("amount") or 0),
        date=as_date(d.get("date")) or date.min,
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        notes=d.get("notes") or None,
    )


class _FirestoreDocs:
    collection = ""

    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(self.collection)

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def update(self, doc_id: str, data: dict) -> bool:
        ref = self._col().document(doc_id)
        if not ref.get().exists:
            return False
        ref.update(data)
        return True

    def delete(self, doc_id: str) -> bool:
        ref = self._col().document(doc_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


class FirestoreFeePaymentRepository(_FirestoreDocs, FeePaymentRepository):
    collection = PAYMENTS_COLLECTION

    def get_by_id(self, payment_id: str) -> Optional[FeePayment]:
        d = snapshot_to_dict(self._col().document(payment_id).get())
        return fee_payment_from_doc(d) if d else None

    def list_all(self) -> Sequence[FeePayment]:
        payments = [fee_payment_from_doc(d) for d in stream_dicts(self._col())]
        payments.sort(key=lambda p: (p.date, p.created_at), reverse=True)
        return payments


class FirestoreReceiptRepository(_FirestoreDocs, ReceiptRepository):
    collection = RECEIPTS_COLLECTION

    def get_by_id(self, receipt_id: str) -> Optional[Receipt]:
        d = snapshot_to_dict(self._col().document(receipt_id).get())
        return receipt_from_doc(d) if d else None

    def get_for_payment(self, payment_id: str) -> Optional[Receipt]:
        q = self._col().where(filter=FieldFilter("paymentRecordId", "==", payment_id)).limit(1)
        rows = stream_dicts(q)
        return receipt_from_doc(rows[0]) if rows else None

    def list_all(self) -> Sequence[Receipt]:
        receipts = [receipt_from_doc(d) for d in stream_dicts(self._col())]
        receipts.sort(key=lambda r: (r.date, r.created_at), reverse=True)
        return receipts

    def numbers_for_year(self, year: int) -> Sequence[str]:
        q = self._col().where(filter=FieldFilter("year", "==", year))
        return [d.get("receiptNumber", "") for d in stream_dicts(q)]
