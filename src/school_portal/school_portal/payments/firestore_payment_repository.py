from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.enums import TeacherPaymentType
from ..database.firestore_base import as_date, as_datetime, snapshot_to_dict, stream_dicts
from .model import TeacherPayment
from .repository import PaymentRepository

COLLECTION = "teacherPayments"


def payment_from_doc(d: dict) -> TeacherPayment:
    return TeacherPayment(
        payment_id=d["id"],
        teacher_id=d.get("teacherId", ""),
        teacher_name=d.get("teacherName", ""),
        amount=float(d.get("amount") or 0),
        date=as_date(d.get("date")) or date.min,
        month=d.get("month", ""),
        payment_type=TeacherPaymentType(d.get("paymentType") or TeacherPaymentType.OTHER.value),
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        description=d.get("description"),
        notes=d.get("notes"),
        updated_at=as_datetime(d.get("updatedAt")),
    )


class FirestorePaymentRepository(PaymentRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, payment_id: str) -> Optional[TeacherPayment]:
        d = snapshot_to_dict(self._col().document(payment_id).get())
        return payment_from_doc(d) if d else None

    def list_payments(self, *, month: Optional[str] = None, teacher_id: Optional[str] = None) -> Sequence[TeacherPayment]:
        q = self._col()
        if month:
            q = q.where(filter=FieldFilter("month", "==", month))
        if teacher_id:
            q = q.where(filter=FieldFilter("teacherId", "==", teacher_id))
        payments = [payment_from_doc(d) for d in stream_dicts(q)]
        payments.sort(key=lambda p: (p.date, p.created_at), reverse=True)
        return payments

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def update(self, payment_id: str, data: dict) -> bool:
        ref = self._col().document(payment_id)
        if not ref.get().exists:
            return False
        ref.update(data)
        return True

    def delete(self, payment_id: str) -> bool:
        ref = self._col().document(payment_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
