from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..database.firestore_base import as_datetime, snapshot_to_dict, stream_dicts
from .model import Notification
from .repository import NotificationRepository

COLLECTION = "notifications"


def _from_doc(d: dict) -> Notification:
    return Notification(
        notification_id=d["id"],
        recipient_id=d.get("recipientId", ""),
        type=d.get("type", ""),
        title=d.get("title", ""),
        message=d.get("message", ""),
        created_at=as_datetime(d.get("createdAt")) or datetime.min,
        read=bool(d.get("read", False)),
        substitution_id=d.get("substitutionId"),
        class_id=d.get("classId"),
    )


class FirestoreNotificationRepository(NotificationRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def add(self, data: dict) -> str:
        _, ref = self._col().add(data)
        return ref.id

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        d = snapshot_to_dict(self._col().document(notification_id).get())
        return _from_doc(d) if d else None

    def list_for(self, recipient_id: str, *, unread_only: bool = False) -> Sequence[Notification]:
        q = self._col().where(filter=FieldFilter("recipientId", "==", recipient_id))
        if unread_only:
            q = q.where(filter=FieldFilter("read", "==", False))
        q = q.order_by("createdAt", direction=gcf.Query.DESCENDING)
        return [_from_doc(d) for d in stream_dicts(q)]

    def mark_read(self, notification_ids: Sequence[str]) -> int:
        if not notification_ids:
            return 0
        batch = self._db.batch()
        for nid in notification_ids:
            batch.update(self._col().document(nid), {"read": True})
        batch.commit()
        return len(notification_ids)

    def delete(self, notification_ids: Sequence[str]) -> int:
        if not notification_ids:
            return 0
        batch = self._db.batch()
        for nid in notification_ids:
            batch.delete(self._col().document(nid))
        batch.commit()
        return len(notification_ids)
