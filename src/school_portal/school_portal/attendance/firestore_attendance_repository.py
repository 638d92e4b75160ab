from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.enums import AttendanceStatus
from ..database.firestore_base import as_date, as_datetime, compact, date_key, snapshot_to_dict, stream_dicts
from .model import AttendanceRecord
from .repository import AttendanceRepository

COLLECTION = "attendance"


def _from_doc(d: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=d["id"],
        student_id=d.get("studentId", ""),
        class_id=d.get("classId", ""),
        date=as_date(d.get("date")) or date.min,
        status=AttendanceStatus(d.get("status", AttendanceStatus.PRESENT.value)),
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        notes=d.get("notes") or None,
    )


class FirestoreAttendanceRepository(AttendanceRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        d = snapshot_to_dict(self._col().document(attendance_id).get())
        return _from_doc(d) if d else None

    def list_for_class(self, class_id: str, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        q = self._col().where(filter=FieldFilter("classId", "==", class_id))
        if day is not None:
            q = q.where(filter=FieldFilter("date", "==", date_key(day)))
        records = [_from_doc(d) for d in stream_dicts(q)]
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        q = self._col().where(filter=FieldFilter("studentId", "==", student_id))
        records = [_from_doc(d) for d in stream_dicts(q)]
        records.sort(key=lambda r: r.date, reverse=True)
        return records

    def create(
        self,
        *,
        student_id: str,
        class_id: str,
        day: date,
        status: AttendanceStatus,
        notes: Optional[str],
        created_by: str,
        created_at: datetime,
    ) -> str:
        _, ref = self._col().add(
            compact(
                {
                    "studentId": student_id,
                    "classId": class_id,
                    "date": date_key(day),
                    "status": status.value,
                    "notes": notes,
                    "createdBy": created_by,
                    "createdAt": created_at,
                }
            )
        )
        return ref.id

    def update(self, attendance_id: str, *, status: AttendanceStatus, notes: Optional[str]) -> bool:
        ref = self._col().document(attendance_id)
        if not ref.get().exists:
            return False
        ref.update({"status": status.value, "notes": notes or ""})
        return True

    def delete(self, attendance_id: str) -> bool:
        ref = self._col().document(attendance_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True
