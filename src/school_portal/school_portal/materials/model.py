from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LessonMaterial:
    material_id: str
    title: str
    description: str
    file_url: str
    file_type: str
    class_id: str
    created_by: str
    created_at: datetime
    lesson_id: Optional[str] = None
    teacher_name: Optional[str] = None
    storage_path: Optional[str] = None
