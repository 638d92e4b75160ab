from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AccountStatus, Role, TeacherType


@dataclass(frozen=True)
class User:
    """Domain entity: User profile.

    Note: Pure data object; the auth account lives in the hosted auth service
    under the same id.
    """

    user_id: str
    email: str
    display_name: str
    role: Role
    account_status: AccountStatus = AccountStatus.ACTIVE
    class_id: Optional[str] = None
    assigned_class_id: Optional[str] = None
    teacher_type: Optional[TeacherType] = None
    available_for_substitution: bool = False
    temporary_classes: tuple[str, ...] = field(default_factory=tuple)
    phone_number: Optional[str] = None
    parent_id: Optional[str] = None
    parent_name: Optional[str] = None
    parent_contact: Optional[str] = None
    payment_exempted: bool = False
    created_at: Optional[datetime] = None

    @property
    def contact(self) -> str:
        """How the school reaches this person: phone first, else email."""
        return (self.phone_number or "").strip() or self.email

    @property
    def is_active(self) -> bool:
        return self.account_status == AccountStatus.ACTIVE
