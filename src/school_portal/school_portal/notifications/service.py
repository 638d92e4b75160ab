from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError
from ..database.firestore_base import compact
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications, one document per recipient."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        *,
        recipient_id: str,
        type: str,
        title: str,
        message: str,
        substitution_id: Optional[str] = None,
        class_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        data = {
            "recipientId": require_non_empty(recipient_id, "Recipient"),
            "type": type,
            "title": require_non_empty(title, "Title"),
            "message": message or "",
            "substitutionId": substitution_id,
            "classId": class_id,
            "createdAt": now or now_local(),
            "read": False,
        }
        return self._notifications.add(compact(data))

    def list_for(self, recipient_id: str) -> Sequence[Notification]:
        return self._notifications.list_for(recipient_id)

    def unread_count(self, recipient_id: str) -> int:
        return len(self._notifications.list_for(recipient_id, unread_only=True))

    def _require_own(self, recipient_id: str, notification_id: str) -> Notification:
        n = self._notifications.get_by_id(notification_id)
        if not n:
            raise NotFoundError("Notification not found")
        if n.recipient_id != recipient_id:
            raise AuthorizationError("This notification belongs to another user")
        return n

    def mark_read(self, *, recipient_id: str, notification_id: str) -> None:
        n = self._require_own(recipient_id, notification_id)
        if not n.read:
            self._notifications.mark_read([n.notification_id])

    def mark_all_read(self, recipient_id: str) -> int:
        unread = self._notifications.list_for(recipient_id, unread_only=True)
        return self._notifications.mark_read([n.notification_id for n in unread])

    def delete(self, *, recipient_id: str, notification_id: str) -> None:
        n = self._require_own(recipient_id, notification_id)
        self._notifications.delete([n.notification_id])

    def clear_all(self, recipient_id: str) -> int:
        existing = self._notifications.list_for(recipient_id)
        count = self._notifications.delete([n.notification_id for n in existing])
        logger.info("Cleared %d notifications for %s", count, recipient_id)
        return count
