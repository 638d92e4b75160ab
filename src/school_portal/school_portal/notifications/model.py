from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Notification:
    notification_id: str
    recipient_id: str
    type: str
    title: str
    message: str
    created_at: datetime
    read: bool = False
    substitution_id: Optional[str] = None
    class_id: Optional[str] = None
