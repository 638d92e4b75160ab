from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from google.cloud import firestore as gcf
from google.cloud.firestore_v1.base_query import FieldFilter

from ..database.firestore_base import as_datetime, stream_dicts
from .model import ActionLog
from .repository import ActionLogRepository

COLLECTION = "actionLogs"


def _from_doc(d: dict) -> ActionLog:
    return ActionLog(
        log_id=d["id"],
        user_id=d.get("userId", ""),
        user_email=d.get("userEmail", ""),
        user_role=d.get("userRole", ""),
        action=d.get("action", ""),
        timestamp=as_datetime(d.get("timestamp")) or datetime.min,
        target_type=d.get("targetType"),
        target_id=d.get("targetId"),
        target_name=d.get("targetName"),
        details=dict(d.get("details") or {}),
        ip_address=d.get("ipAddress"),
        user_agent=d.get("userAgent"),
    )


class FirestoreActionLogRepository(ActionLogRepository):
    def __init__(self, db):
        self._db = db

    def add(self, data: dict) -> str:
        _, ref = self._db.collection(COLLECTION).add(data)
        return ref.id

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
        q = self._db.collection(COLLECTION)
        if user_id:
            q = q.where(filter=FieldFilter("userId", "==", user_id))
        if action:
            q = q.where(filter=FieldFilter("action", "==", action))
        if target_type:
            q = q.where(filter=FieldFilter("targetType", "==", target_type))
        if start:
            q = q.where(filter=FieldFilter("timestamp", ">=", start))
        if end:
            q = q.where(filter=FieldFilter("timestamp", "<=", end))

        q = q.order_by("timestamp", direction=gcf.Query.DESCENDING)
        if limit:
            q = q.limit(int(limit))
        return [_from_doc(d) for d in stream_dicts(q)]
