from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..database.firestore_base import as_date, as_datetime, date_key, snapshot_to_dict, stream_dicts
from .model import Lesson
from .repository import LessonRepository

COLLECTION = "lessons"

_FIELDS = {
    "title": "title",
    "description": "description",
    "date": "date",
    "topics": "topics",
}

_LINKS = ("materials", "homeworks")


def lesson_from_doc(d: dict) -> Lesson:
    return Lesson(
        lesson_id=d["id"],
        title=d.get("title", ""),
        description=d.get("description", ""),
        class_id=d.get("classId", ""),
        date=as_date(d.get("date")) or date.min,
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        topics=tuple(d.get("topics") or ()),
        materials=tuple(d.get("materials") or ()),
        homeworks=tuple(d.get("homeworks") or ()),
        teacher_name=d.get("teacherName"),
    )


class FirestoreLessonRepository(LessonRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, lesson_id: str) -> Optional[Lesson]:
        d = snapshot_to_dict(self._col().document(lesson_id).get())
        return lesson_from_doc(d) if d else None

    def list_for_class(self, class_id: str) -> Sequence[Lesson]:
        q = (
            self._col()
            .where(filter=FieldFilter("classId", "==", class_id))
            .order_by("date", direction=gcf.Query.DESCENDING)
        )
        return [lesson_from_doc(d) for d in stream_dicts(q)]

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def update(self, lesson_id: str, fields: dict) -> bool:
        ref = self._col().document(lesson_id)
        if not ref.get().exists:
            return False
        data = {}
        for k, v in fields.items():
            if k == "date":
                v = date_key(v)
            elif k == "topics":
                v = list(v)
            data[_FIELDS[k]] = v
        ref.update(data)
        return True

    def delete(self, lesson_id: str) -> bool:
        ref = self._col().document(lesson_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True

    def add_link(self, lesson_id: str, field_name: str, item_id: str) -> bool:
        if field_name not in _LINKS:
            raise ValueError(f"Unknown lesson link: {field_name}")
        ref = self._col().document(lesson_id)
        if not ref.get().exists:
            return False
        ref.update({field_name: gcf.ArrayUnion([item_id])})
        return True
