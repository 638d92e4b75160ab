from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ActionLog


class ActionLogRepository(Protocol):
    def add(self, data: dict) -> str:
        """Persist a log entry already shaped as a document."""

        raise NotImplementedError

    def query(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[ActionLog]:
        """Most recent first."""

        raise NotImplementedError
