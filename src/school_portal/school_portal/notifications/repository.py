from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def add(self, data: dict) -> str:
        raise NotImplementedError

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        raise NotImplementedError

    def list_for(self, recipient_id: str, *, unread_only: bool = False) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def mark_read(self, notification_ids: Sequence[str]) -> int:
        raise NotImplementedError

    def delete(self, notification_ids: Sequence[str]) -> int:
        raise NotImplementedError
