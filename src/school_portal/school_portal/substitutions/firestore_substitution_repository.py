from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.enums import SubstitutionStatus
from ..database.firestore_base import as_date, as_datetime, compact, date_key, snapshot_to_dict, stream_dicts
from .model import NewSubstitution, Substitution
from .repository import SubstitutionRepository

COLLECTION = "substitutions"
HISTORY_COLLECTION = "substitutionHistory"


def _parse_time(value: Optional[str]) -> time:
    if not value:
        return time.min
    return datetime.strptime(value, "%H:%M").time()


def substitution_from_doc(d: dict) -> Substitution:
    return Substitution(
        substitution_id=d["id"],
        teacher_id=d.get("teacherId", ""),
        teacher_name=d.get("teacherName", ""),
        class_id=d.get("classId", ""),
        class_name=d.get("className", ""),
        date=as_date(d.get("date")) or date.min,
        start_time=_parse_time(d.get("startTime")),
        end_time=_parse_time(d.get("endTime")),
        reason=d.get("reason", ""),
        status=SubstitutionStatus(d.get("status", SubstitutionStatus.PENDING.value)),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        original_teacher_id=d.get("originalTeacherId"),
        original_teacher_name=d.get("originalTeacherName"),
        notes=d.get("notes"),
        updated_at=as_datetime(d.get("updatedAt")),
        approved_by=d.get("approvedBy"),
        approved_at=as_datetime(d.get("approvedAt")),
    )


class FirestoreSubstitutionRepository(SubstitutionRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def create(self, sub: NewSubstitution, *, created_at: datetime) -> str:
        data = {
            "teacherId": sub.teacher_id,
            "teacherName": sub.teacher_name,
            "classId": sub.class_id,
            "className": sub.class_name,
            "originalTeacherId": sub.original_teacher_id,
            "originalTeacherName": sub.original_teacher_name,
            "date": date_key(sub.date),
            "startTime": sub.start_time.strftime("%H:%M"),
            "endTime": sub.end_time.strftime("%H:%M"),
            "reason": sub.reason,
            "status": sub.status.value,
            "createdAt": created_at,
            "updatedAt": created_at,
        }
        _, ref = self._col().add(compact(data))
        return ref.id

    def get_by_id(self, substitution_id: str) -> Optional[Substitution]:
        d = snapshot_to_dict(self._col().document(substitution_id).get())
        return substitution_from_doc(d) if d else None

    def set_status(
        self,
        substitution_id: str,
        *,
        status: SubstitutionStatus,
        updated_at: datetime,
        approved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        ref = self._col().document(substitution_id)
        if not ref.get().exists:
            return False

        data = {"status": status.value, "updatedAt": updated_at}
        if approved_by:
            data["approvedBy"] = approved_by
            data["approvedAt"] = updated_at
        if notes:
            data["notes"] = notes
        ref.update(data)
        return True

    def list_for_teacher(self, teacher_id: str) -> Sequence[Substitution]:
        q = (
            self._col()
            .where(filter=FieldFilter("teacherId", "==", teacher_id))
            .order_by("date", direction=gcf.Query.DESCENDING)
        )
        return [substitution_from_doc(d) for d in stream_dicts(q)]

    def list_by_status(self, status: SubstitutionStatus) -> Sequence[Substitution]:
        q = self._col().where(filter=FieldFilter("status", "==", status.value))
        subs = [substitution_from_doc(d) for d in stream_dicts(q)]
        subs.sort(key=lambda s: (s.date, s.start_time))
        return subs

    def list_for_teacher_on(
        self,
        teacher_id: str,
        day: date,
        statuses: Iterable[SubstitutionStatus],
    ) -> Sequence[Substitution]:
        q = (
            self._col()
            .where(filter=FieldFilter("teacherId", "==", teacher_id))
            .where(filter=FieldFilter("date", "==", date_key(day)))
            .where(filter=FieldFilter("status", "in", [s.value for s in statuses]))
        )
        return [substitution_from_doc(d) for d in stream_dicts(q)]

    def list_before(self, day: date) -> Sequence[Substitution]:
        q = (
            self._col()
            .where(filter=FieldFilter("date", "<", date_key(day)))
            .order_by("date", direction=gcf.Query.DESCENDING)
        )
        return [substitution_from_doc(d) for d in stream_dicts(q)]

    def add_history(self, entry: dict) -> None:
        self._db.collection(HISTORY_COLLECTION).add(entry)
