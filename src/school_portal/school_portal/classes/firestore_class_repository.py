from __future__ import annotations

from typing import Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import now_local
from ..core.enums import Turno
from ..database.firestore_base import as_datetime, snapshot_to_dict, stream_dicts, unique
from .model import SchoolClass
from .repository import ClassRepository

COLLECTION = "classes"

_FIELDS = {
    "name": "name",
    "description": "description",
    "turno": "turno",
    "teacher_id": "teacherId",
}


def class_from_doc(d: dict) -> SchoolClass:
    turno = d.get("turno")
    return SchoolClass(
        class_id=d["id"],
        name=d.get("name", ""),
        description=d.get("description", ""),
        turno=Turno(turno) if turno else None,
        teacher_id=d.get("teacherId") or None,
        students=tuple(d.get("students") or ()),
        created_at=as_datetime(d.get("createdAt")),
    )


class FirestoreClassRepository(ClassRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        d = snapshot_to_dict(self._col().document(class_id).get())
        return class_from_doc(d) if d else None

    def get_many(self, class_ids: Sequence[str]) -> Sequence[SchoolClass]:
        ids = unique(class_ids)
        if not ids:
            return []
        snaps = self._db.get_all([self._col().document(cid) for cid in ids])
        return [class_from_doc(d) for d in (snapshot_to_dict(s) for s in snaps) if d]

    def list_all(self) -> Sequence[SchoolClass]:
        classes = [class_from_doc(d) for d in stream_dicts(self._col())]
        classes.sort(key=lambda c: c.name.lower())
        return classes

    def list_for_teacher(self, teacher_id: str) -> Sequence[SchoolClass]:
        q = self._col().where(filter=FieldFilter("teacherId", "==", teacher_id))
        return [class_from_doc(d) for d in stream_dicts(q)]

    def create(self, *, name: str, description: str, turno: Optional[Turno], teacher_id: Optional[str]) -> str:
        _, ref = self._col().add(
            {
                "name": name,
                "description": description,
                "turno": turno.value if turno else None,
                "teacherId": teacher_id,
                "students": [],
                "createdAt": now_local(),
            }
        )
        return ref.id

    def update(self, class_id: str, fields: dict) -> bool:
        ref = self._col().document(class_id)
        if not ref.get().exists:
            return False
        data = {}
        for k, v in fields.items():
            data[_FIELDS[k]] = v.value if isinstance(v, Turno) else v
        ref.update(data)
        return True

    def delete(self, class_id: str) -> bool:
        ref = self._col().document(class_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True

    def set_students(self, class_id: str, student_ids: Sequence[str]) -> bool:
        ref = self._col().document(class_id)
        if not ref.get().exists:
            return False
        ref.update({"students": unique(student_ids)})
        return True
