from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..core.enums import Turno


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class with its roster."""

    class_id: str
    name: str
    description: str = ""
    turno: Optional[Turno] = None
    teacher_id: Optional[str] = None
    students: tuple[str, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None
    # Set only on read-models for classes a teacher covers through a substitution.
    is_temporary: bool = False

    def as_temporary(self) -> "SchoolClass":
        return replace(self, is_temporary=True)
