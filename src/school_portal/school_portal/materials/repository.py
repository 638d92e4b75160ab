from __future__ import annotations

from typing import BinaryIO, Optional, Protocol, Sequence

from .model import LessonMaterial


class MaterialRepository(Protocol):
    def get_by_id(self, material_id: str) -> Optional[LessonMaterial]:
        raise NotImplementedError

    def get_many(self, material_ids: Sequence[str]) -> Sequence[LessonMaterial]:
        raise NotImplementedError

    def list_for_class(self, class_id: str) -> Sequence[LessonMaterial]:
        raise NotImplementedError

    def list_all(self) -> Sequence[LessonMaterial]:
        raise NotImplementedError

    def list_by_storage_path(self, storage_path: str) -> Sequence[LessonMaterial]:
        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def update(self, material_id: str, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, material_id: str) -> bool:
        raise NotImplementedError


class FileStorage(Protocol):
    """Hosted object storage for uploaded files."""

    def upload(self, path: str, stream: BinaryIO, *, content_type: str) -> str:
        """Store the file and return a URL clients can download it from."""

        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError
