from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ActionLog:
    log_id: str
    user_id: str
    user_email: str
    user_role: str
    action: str
    timestamp: datetime
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    target_name: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class Actor:
    """Who performed an action, as carried in the session."""

    user_id: str
    email: str
    role: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
