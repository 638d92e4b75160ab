from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Lesson


class LessonRepository(Protocol):
    def get_by_id(self, lesson_id: str) -> Optional[Lesson]:
        raise NotImplementedError

    def list_for_class(self, class_id: str) -> Sequence[Lesson]:
        """Most recent first."""

        raise NotImplementedError

    def create(self, data: dict) -> str:
        raise NotImplementedError

    def update(self, lesson_id: str, fields: dict) -> bool:
        raise NotImplementedError

    def delete(self, lesson_id: str) -> bool:
        raise NotImplementedError

    def add_link(self, lesson_id: str, field_name: str, item_id: str) -> bool:
        """Append `item_id` to the `materials` or `homeworks` list without duplicates."""

        raise NotImplementedError
