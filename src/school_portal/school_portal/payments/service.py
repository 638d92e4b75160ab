from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..action_logs.model import Actor
from ..action_logs.service import ActionLogger
from ..common.datetime_utils import month_of, now_local
from ..common.validators import require_amount, require_month
from ..core.enums import ActionType, Role, TeacherPaymentType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import has_admin_access
from ..database.firestore_base import date_key
from ..users.repository import UserRepository
from .model import MonthlySummary, TeacherPayment
from .repository import PaymentRepository


class PaymentService:
    """Use case: log what the school paid its teachers."""

    def __init__(
        self,
        payments: PaymentRepository,
        users: UserRepository,
        action_logger: Optional[ActionLogger] = None,
    ):
        self._payments = payments
        self._users = users
        self._action_logger = action_logger

    def _log(self, actor: Optional[Actor], action: ActionType, payment_id: str, teacher_name: str, **details) -> None:
        if self._action_logger:
            self._action_logger.log_action(
                actor,
                action,
                target_type="payment",
                target_id=payment_id,
                target_name=teacher_name,
                details=details or None,
            )

    @staticmethod
    def _parse_type(payment_type) -> TeacherPaymentType:
        try:
            return TeacherPaymentType(payment_type or TeacherPaymentType.SALARY.value)
        except ValueError:
            raise ValidationError("Invalid payment type")

    def _fields(self, *, amount, day: Optional[date], month: Optional[str], payment_type, description, notes) -> dict:
        if not day:
            raise ValidationError("Payment date is required")
        return {
            "amount": require_amount(amount),
            "date": date_key(day),
            "month": require_month(month) if month else month_of(day),
            "paymentType": self._parse_type(payment_type).value,
            "description": (description or "").strip(),
            "notes": (notes or "").strip(),
        }

    def log_payment(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        teacher_id: str,
        amount,
        day: Optional[date],
        payment_type: str = TeacherPaymentType.SALARY.value,
        month: Optional[str] = None,
        description: str = "",
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> str:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to log payments")

        teacher = self._users.get_by_id(teacher_id)
        if not teacher or teacher.role != Role.TEACHER:
            raise ValidationError("Selected user is not a teacher")

        data = self._fields(
            amount=amount,
            day=day,
            month=month,
            payment_type=payment_type,
            description=description,
            notes=notes,
        )
        data.update(
            {
                "teacherId": teacher.user_id,
                "teacherName": teacher.display_name,
                "createdBy": actor.user_id if actor else "",
                "createdAt": now or now_local(),
            }
        )
        payment_id = self._payments.create(data)
        self._log(actor, ActionType.PAYMENT_CREATED, payment_id, teacher.display_name, amount=data["amount"])
        return payment_id

    def update_payment(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        payment_id: str,
        amount,
        day: Optional[date],
        payment_type: str,
        month: Optional[str] = None,
        description: str = "",
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> None:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to edit payments")

        existing = self._require(payment_id)
        data = self._fields(
            amount=amount,
            day=day,
            month=month,
            payment_type=payment_type,
            description=description,
            notes=notes,
        )
        data["updatedAt"] = now or now_local()
        self._payments.update(payment_id, data)
        self._log(actor, ActionType.PAYMENT_UPDATED, payment_id, existing.teacher_name, amount=data["amount"])

    def delete_payment(self, *, actor: Optional[Actor], current_role: Role, payment_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can delete payments")

        existing = self._require(payment_id)
        self._payments.delete(payment_id)
        self._log(actor, ActionType.PAYMENT_DELETED, payment_id, existing.teacher_name, amount=existing.amount)

    def _require(self, payment_id: str) -> TeacherPayment:
        p = self._payments.get_by_id(payment_id)
        if not p:
            raise NotFoundError("Payment not found")
        return p

    def list_payments(self, *, month: Optional[str] = None, teacher_id: Optional[str] = None) -> Sequence[TeacherPayment]:
        return self._payments.list_payments(
            month=require_month(month) if month else None,
            teacher_id=teacher_id or None,
        )

    def monthly_summary(self, month: str) -> MonthlySummary:
        payments = self._payments.list_payments(month=require_month(month))
        by_teacher: dict[str, float] = defaultdict(float)
        by_type: dict[str, float] = defaultdict(float)
        for p in payments:
            by_teacher[p.teacher_name] += p.amount
            by_type[p.payment_type.value] += p.amount
        return MonthlySummary(
            month=month,
            total=round(sum(p.amount for p in payments), 2),
            count=len(payments),
            by_teacher={k: round(v, 2) for k, v in sorted(by_teacher.items())},
            by_type={k: round(v, 2) for k, v in by_type.items()},
        )
