from __future__ import annotations

import logging
from datetime import datetime
from typing import BinaryIO, Optional, Sequence

from werkzeug.utils import secure_filename

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import MAX_UPLOAD_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import can_create, can_delete, can_edit
from ..database.firestore_base import compact
from ..users.model import User
from .model import LessonMaterial
from .repository import FileStorage, MaterialRepository

logger = logging.getLogger(__name__)


class MaterialService:
    """Lesson materials: the file goes to object storage, the metadata to a document per class."""

    def __init__(self, materials: MaterialRepository, storage: FileStorage, classes: ClassRepository):
        self._materials = materials
        self._storage = storage
        self._classes = classes

    def _require(self, material_id: str) -> LessonMaterial:
        m = self._materials.get_by_id(material_id)
        if not m:
            raise NotFoundError("Material not found")
        return m

    @staticmethod
    def _check_owner(current_user: User, material: LessonMaterial) -> None:
        if current_user.role == Role.TEACHER and material.created_by != current_user.user_id:
            raise AuthorizationError("You can only change your own materials")

    def upload(
        self,
        *,
        current_user: User,
        title: str,
        description: str,
        class_ids: Sequence[str],
        filename: str,
        stream: BinaryIO,
        size: int,
        content_type: str = "application/octet-stream",
        lesson_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[str]:
        """Upload once and write one material document for every selected class."""

        if not can_create(current_user.role, "materials"):
            raise AuthorizationError("You are not allowed to upload materials")

        title = require_non_empty(title, "Title")
        description = require_non_empty(description, "Description")
        if not class_ids:
            raise ValidationError("Select at least one class")

        safe_name = secure_filename(filename or "")
        if not safe_name:
            raise ValidationError("Select a file to upload")
        if size > MAX_UPLOAD_BYTES:
            raise ValidationError("The file exceeds the 10 MB limit")

        classes = self._classes.get_many(class_ids)
        if len(classes) != len(set(class_ids)):
            raise NotFoundError("Class not found")

        now = now or now_local()
        path = f"materials/{int(now.timestamp() * 1000)}_{safe_name}"
        url = self._storage.upload(path, stream, content_type=content_type)

        ids = []
        for cls in classes:
            data = {
                "title": title,
                "description": description,
                "classId": cls.class_id,
                "lessonId": lesson_id or None,
                "fileUrl": url,
                "fileType": content_type,
                "storagePath": path,
                "createdBy": current_user.user_id,
                "teacherName": current_user.display_name,
                "createdAt": now,
            }
            ids.append(self._materials.create(compact(data)))
        return ids

    def update(
        self,
        *,
        current_user: User,
        material_id: str,
        title: str,
        description: str,
        lesson_id: Optional[str] = None,
    ) -> None:
        if not can_edit(current_user.role, "materials"):
            raise AuthorizationError("You are not allowed to edit materials")

        material = self._require(material_id)
        self._check_owner(current_user, material)
        self._materials.update(
            material_id,
            {
                "title": require_non_empty(title, "Title"),
                "description": require_non_empty(description, "Description"),
                "lesson_id": lesson_id or None,
            },
        )

    def delete(self, *, current_user: User, material_id: str) -> None:
        if not can_delete(current_user.role, "materials"):
            raise AuthorizationError("You are not allowed to delete materials")

        material = self._require(material_id)
        self._check_owner(current_user, material)
        self._materials.delete(material_id)

        # The stored file is shared by the copies made for other classes.
        if material.storage_path and not self._materials.list_by_storage_path(material.storage_path):
            try:
                self._storage.delete(material.storage_path)
            except Exception:
                logger.warning("Failed to delete stored file %s", material.storage_path, exc_info=True)

    def get(self, material_id: str) -> LessonMaterial:
        return self._require(material_id)

    def list_for_class(self, class_id: str) -> Sequence[LessonMaterial]:
        return self._materials.list_for_class(class_id)

    def list_all(self) -> Sequence[LessonMaterial]:
        return self._materials.list_all()

    def list_for_classes(self, class_ids: Sequence[str]) -> Sequence[LessonMaterial]:
        out: list[LessonMaterial] = []
        for cid in dict.fromkeys(class_ids):
            out.extend(self._materials.list_for_class(cid))
        out.sort(key=lambda m: m.created_at, reverse=True)
        return out
