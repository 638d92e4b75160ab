from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Turno
from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_many(self, class_ids: Sequence[str]) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def create(self, *, name: str, description: str, turno: Optional[Turno], teacher_id: Optional[str]) -> str:
        raise NotImplementedError

    def update(self, class_id: str, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, class_id: str) -> bool:
        raise NotImplementedError

    def set_students(self, class_id: str, student_ids: Sequence[str]) -> bool:
        raise NotImplementedError
