from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import SubstitutionStatus
from .model import NewSubstitution, Substitution


class SubstitutionRepository(Protocol):
    def create(self, sub: NewSubstitution, *, created_at: datetime) -> str:
        raise NotImplementedError

    def get_by_id(self, substitution_id: str) -> Optional[Substitution]:
        raise NotImplementedError

    def set_status(
        self,
        substitution_id: str,
        *,
        status: SubstitutionStatus,
        updated_at: datetime,
        approved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str) -> Sequence[Substitution]:
        """Newest first."""

        raise NotImplementedError

    def list_by_status(self, status: SubstitutionStatus) -> Sequence[Substitution]:
        raise NotImplementedError

    def list_for_teacher_on(
        self,
        teacher_id: str,
        day: date,
        statuses: Iterable[SubstitutionStatus],
    ) -> Sequence[Substitution]:
        raise NotImplementedError

    def list_before(self, day: date) -> Sequence[Substitution]:
        """History: substitutions strictly before `day`, latest first."""

        raise NotImplementedError

    def add_history(self, entry: dict) -> None:
        raise NotImplementedError
