from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import day_bounds
from ..core.enums import CheckInStatus
from ..database.firestore_base import as_datetime, compact, stream_dicts
from .model import TeacherCheckIn
from .repository import CheckInRepository

COLLECTION = "teacherCheckIns"


def checkin_from_doc(d: dict) -> TeacherCheckIn:
    late_minutes = d.get("lateMinutes")
    return TeacherCheckIn(
        checkin_id=d["id"],
        teacher_id=d.get("teacherId", ""),
        teacher_name=d.get("teacherName", ""),
        class_id=d.get("classId", ""),
        class_name=d.get("className", ""),
        check_in_time=as_datetime(d.get("checkInTime")) or datetime.min,
        status=CheckInStatus(d.get("status", CheckInStatus.CHECKED_IN.value)),
        check_out_time=as_datetime(d.get("checkOutTime")),
        is_late=bool(d.get("isLate", False)),
        late_minutes=int(late_minutes) if late_minutes is not None else None,
        scheduled_lesson_id=d.get("scheduledLessonId"),
        location=d.get("location"),
        created_at=as_datetime(d.get("createdAt")),
    )


class FirestoreCheckInRepository(CheckInRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_for_teacher_on(self, teacher_id: str, day: date) -> Optional[TeacherCheckIn]:
        start, end = day_bounds(day)
        q = (
            self._col()
            .where(filter=FieldFilter("teacherId", "==", teacher_id))
            .where(filter=FieldFilter("checkInTime", ">=", start))
            .where(filter=FieldFilter("checkInTime", "<", end))
            .limit(1)
        )
        rows = stream_dicts(q)
        return checkin_from_doc(rows[0]) if rows else None

    def list_for_teacher(self, teacher_id: str, *, limit: int) -> Sequence[TeacherCheckIn]:
        q = (
            self._col()
            .where(filter=FieldFilter("teacherId", "==", teacher_id))
            .order_by("checkInTime", direction=gcf.Query.DESCENDING)
            .limit(int(limit))
        )
        return [checkin_from_doc(d) for d in stream_dicts(q)]

    def list_between(self, start: datetime, end: datetime) -> Sequence[TeacherCheckIn]:
        q = (
            self._col()
            .where(filter=FieldFilter("checkInTime", ">=", start))
            .where(filter=FieldFilter("checkInTime", "<", end))
        )
        return [checkin_from_doc(d) for d in stream_dicts(q)]

    def create(
        self,
        *,
        teacher_id: str,
        teacher_name: str,
        class_id: str,
        class_name: str,
        check_in_time: datetime,
        status: CheckInStatus,
        is_late: bool,
        late_minutes: Optional[int],
        location: Optional[str],
    ) -> str:
        data = {
            "teacherId": teacher_id,
            "teacherName": teacher_name,
            "classId": class_id,
            "className": class_name,
            "checkInTime": check_in_time,
            "status": status.value,
            "isLate": is_late,
            "lateMinutes": late_minutes,
            "location": location,
            "createdAt": check_in_time,
        }
        _, ref = self._col().add(compact(data))
        return ref.id

    def update_checkout(self, checkin_id: str, *, check_out_time: datetime, status: CheckInStatus) -> bool:
        ref = self._col().document(checkin_id)
        if not ref.get().exists:
            return False
        ref.update({"checkOutTime": check_out_time, "status": status.value})
        return True
