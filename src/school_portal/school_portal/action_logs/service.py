from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import ACTION_STATS_LIMIT, DEFAULT_LIST_LIMIT
from ..core.enums import ActionType, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import ActionLog, Actor
from .repository import ActionLogRepository

logger = logging.getLogger(__name__)


class ActionLogger:
    """Audit trail writer.

    Logging must never break the action being logged, so every failure is
    reported through `logging` and swallowed.
    """

    def __init__(self, logs: ActionLogRepository):
        self._logs = logs

    def log_action(
        self,
        actor: Optional[Actor],
        action: ActionType,
        *,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        target_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        if actor is None:
            return None

        data: Dict[str, Any] = {
            "userId": actor.user_id,
            "userEmail": actor.email,
            "userRole": actor.role,
            "action": action.value,
            "timestamp": now or now_local(),
        }
        optional = {
            "ipAddress": actor.ip_address,
            "userAgent": actor.user_agent,
            "targetType": target_type,
            "targetId": target_id,
            "targetName": target_name,
            "details": details,
        }
        data.update({k: v for k, v in optional.items() if v is not None})

        try:
            return self._logs.add(data)
        except Exception:
            logger.warning("Failed to write action log %s for %s", action.value, actor.user_id, exc_info=True)
            return None


class ActionLogService:
    """Use case: browse the audit trail (admin only)."""

    GROUPINGS = ("user", "action", "day")

    def __init__(self, logs: ActionLogRepository):
        self._logs = logs

    def list_logs(
        self,
        *,
        current_role: Role,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[ActionLog]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You are not allowed to view action logs")

        return self._logs.query(
            user_id=user_id or None,
            action=action or None,
            target_type=target_type or None,
            start=start,
            end=end,
            limit=limit,
        )

    def stats(
        self,
        *,
        current_role: Role,
        group_by: str = "action",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, int]:
        if group_by not in self.GROUPINGS:
            raise ValidationError(f"Unknown grouping: {group_by}")

        logs = self.list_logs(current_role=current_role, start=start, end=end, limit=ACTION_STATS_LIMIT)

        counts: Counter[str] = Counter()
        for log in logs:
            if group_by == "user":
                key = f"{log.user_email} ({log.user_role})"
            elif group_by == "day":
                key = log.timestamp.strftime("%Y-%m-%d")
            else:
                key = log.action
            counts[key] += 1
        return dict(counts.most_common())
