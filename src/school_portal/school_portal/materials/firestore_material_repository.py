from __future__ import annotations

import logging
from datetime import datetime
from typing import BinaryIO, Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..database.connection import FirebaseConnection
from ..database.firestore_base import as_datetime, snapshot_to_dict, stream_dicts, unique
from .model import LessonMaterial
from .repository import FileStorage, MaterialRepository

logger = logging.getLogger(__name__)

COLLECTION = "materials"

_FIELDS = {
    "title": "title",
    "description": "description",
    "lesson_id": "lessonId",
    "class_id": "classId",
}


def material_from_doc(d: dict) -> LessonMaterial:
    return LessonMaterial(
        material_id=d["id"],
        title=d.get("title", ""),
        description=d.get("description", ""),
        file_url=d.get("fileUrl", ""),
        file_type=d.get("fileType", ""),
        class_id=d.get("classId", ""),
        created_by=d.get("createdBy", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        lesson_id=d.get("lessonId"),
        teacher_name=d.get("teacherName"),
        storage_path=d.get("storagePath"),
    )


class FirestoreMaterialRepository(MaterialRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, material_id: str) -> Optional[LessonMaterial]:
        d = snapshot_to_dict(self._col().document(material_id).get())
        return material_from_doc(d) if d else None

    def get_many(self, material_ids: Sequence[str]) -> Sequence[LessonMaterial]:
        ids = unique(material_ids)
        if not ids:
            return []
        snaps = self._db.get_all([self._col().document(mid) for mid in ids])
        return [material_from_doc(d) for d in (snapshot_to_dict(s) for s in snaps) if d]

    def list_for_class(self, class_id: str) -> Sequence[LessonMaterial]:
        q = (
            self._col()
            .where(filter=FieldFilter("classId", "==", class_id))
            .order_by("createdAt", direction=gcf.Query.DESCENDING)
        )
        return [material_from_doc(d) for d in stream_dicts(q)]

    def list_all(self) -> Sequence[LessonMaterial]:
        q = self._col().order_by("createdAt", direction=gcf.Query.DESCENDING)
        return [material_from_doc(d) for d in stream_dicts(q)]

    def list_by_storage_path(self, storage_path: str) -> Sequence[LessonMaterial]:
        q = self._col().where(filter=FieldFilter("storagePath", "==", storage_path))
        return [material_from_doc(d) for d in stream_dicts(q)]

    def create(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def update(self, material_id: str, fields: dict) -> bool:
        ref = self._col().document(material_id)
        if not ref.get().exists:
            return False
        ref.update({_FIELDS[k]: v for k, v in fields.items()})
        return True

    def delete(self, material_id: str) -> bool:
        ref = self._col().document(material_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True


class FirebaseFileStorage(FileStorage):
    """Files live in the project's default storage bucket."""

    def __init__(self, conn: FirebaseConnection):
        self._conn = conn

    def upload(self, path: str, stream: BinaryIO, *, content_type: str) -> str:
        blob = self._conn.bucket().blob(path)
        blob.upload_from_file(stream, content_type=content_type)
        blob.make_public()
        logger.info("Uploaded %s (%s)", path, content_type)
        return blob.public_url

    def delete(self, path: str) -> None:
        self._conn.bucket().blob(path).delete()
