from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..homework.model import Homework
from ..materials.model import LessonMaterial


@dataclass(frozen=True)
class Lesson:
    lesson_id: str
    title: str
    description: str
    class_id: str
    date: date
    created_by: str
    created_at: datetime
    topics: tuple[str, ...] = field(default_factory=tuple)
    materials: tuple[str, ...] = field(default_factory=tuple)
    homeworks: tuple[str, ...] = field(default_factory=tuple)
    teacher_name: Optional[str] = None


@dataclass(frozen=True)
class LessonDetails:
    """Read-model: a lesson with its linked documents resolved."""

    lesson: Lesson
    materials: list[LessonMaterial]
    homeworks: list[Homework]
