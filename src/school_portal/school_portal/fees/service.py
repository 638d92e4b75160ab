from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..action_logs.model import Actor
from ..action_logs.service import ActionLogger
from ..common.datetime_utils import now_local
from ..common.validators import require_amount
from ..core.constants import FAMILY_FEES
from ..core.enums import AccountStatus, ActionType, FeeStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import has_admin_access
from ..database.firestore_base import date_key
from ..users.model import User
from ..users.repository import UserRepository
from .model import FamilyAccount, FeePayment, Receipt
from .repository import FeePaymentRepository, ReceiptRepository

logger = logging.getLogger(__name__)

SORT_KEYS = {
    "parent_name": lambda a: a.parent_name.lower(),
    "total_amount": lambda a: a.total_amount,
    "paid_amount": lambda a: a.paid_amount,
}

CSV_HEADERS = ["Parent", "Phone", "Children", "Total", "Paid", "Remaining", "Status"]

UNKNOWN_PARENT = "Name not given"


def fee_for(children_count: int) -> float:
    if children_count <= 0:
        return 0.0
    return FAMILY_FEES[min(children_count, max(FAMILY_FEES))]


class FeeService:
    """Use case: track what each family owes and has paid for the year.

    Families are derived from enrolled students sharing a `parentContact`.
    Every recorded payment gets a numbered receipt.
    """

    def __init__(
        self,
        payments: FeePaymentRepository,
        receipts: ReceiptRepository,
        users: UserRepository,
        action_logger: Optional[ActionLogger] = None,
    ):
        self._payments = payments
        self._receipts = receipts
        self._users = users
        self._action_logger = action_logger

    def _log(self, actor: Optional[Actor], action: ActionType, target_id: str, parent_name: str, **details) -> None:
        if self._action_logger:
            self._action_logger.log_action(
                actor,
                action,
                target_type="fee_payment",
                target_id=target_id,
                target_name=parent_name,
                details=details or None,
            )

    def family_accounts(self) -> list[FamilyAccount]:
        students = self._users.list_users(role=Role.STUDENT, status=AccountStatus.ACTIVE)
        families: dict[str, list[User]] = defaultdict(list)
        for s in students:
            contact = (s.parent_contact or "").strip()
            if contact:
                families[contact].append(s)

        paid: dict[str, list[FeePayment]] = defaultdict(list)
        for p in self._payments.list_all():
            paid[p.parent_contact].append(p)

        accounts = []
        for contact, children in families.items():
            names = [c.parent_name.strip() for c in children if c.parent_name and c.parent_name.strip()]
            exempted = any(c.payment_exempted for c in children)
            payments = paid.get(contact, [])
            accounts.append(
                FamilyAccount(
                    parent_contact=contact,
                    parent_name=names[0] if names else UNKNOWN_PARENT,
                    children=tuple(sorted(children, key=lambda c: c.display_name.lower())),
                    total_amount=0.0 if exempted else fee_for(len(children)),
                    paid_amount=round(sum(p.amount for p in payments), 2),
                    is_exempted=exempted,
                    payments=tuple(payments),
                )
            )
        accounts.sort(key=SORT_KEYS["parent_name"])
        return accounts

    def get_account(self, parent_contact: str) -> FamilyAccount:
        contact = (parent_contact or "").strip()
        for account in self.family_accounts():
            if account.parent_contact == contact:
                return account
        raise NotFoundError("No enrolled students for this parent contact")

    def account_for_parent(self, parent: User) -> Optional[FamilyAccount]:
        """The family a parent account belongs to, found through its linked children."""

        child_ids = {c.user_id for c in self._users.list_children(parent.user_id)}
        for account in self.family_accounts():
            if any(c.user_id in child_ids for c in account.children):
                return account
        return None

    @staticmethod
    def filter_and_sort(
        accounts: Sequence[FamilyAccount],
        *,
        search: str = "",
        status: str = "all",
        sort_by: str = "parent_name",
        descending: bool = False,
    ) -> list[FamilyAccount]:
        q = (search or "").strip().lower()
        out = [
            a
            for a in accounts
            if not q
            or q in a.parent_name.lower()
            or q in a.parent_contact.lower()
            or any(q in c.display_name.lower() for c in a.children)
        ]
        if status and status != "all":
            try:
                wanted = FeeStatus(status)
            except ValueError:
                raise ValidationError("Invalid payment status filter")
            out = [a for a in out if a.status == wanted]

        key = SORT_KEYS.get(sort_by)
        if key is None:
            raise ValidationError("Invalid sort field")
        return sorted(out, key=key, reverse=descending)

    @staticmethod
    def totals(accounts: Sequence[FamilyAccount]) -> dict:
        return {
            "families": len(accounts),
            "due": round(sum(a.total_amount for a in accounts), 2),
            "paid": round(sum(a.paid_amount for a in accounts), 2),
            "remaining": round(sum(a.remaining for a in accounts), 2),
        }

    @staticmethod
    def csv_rows(accounts: Sequence[FamilyAccount]) -> list[dict]:
        return [
            {
                "Parent": a.parent_name,
                "Phone": a.parent_contact,
                "Children": len(a.children),
                "Total": f"{a.total_amount:.2f}",
                "Paid": f"{a.paid_amount:.2f}",
                "Remaining": f"{a.remaining:.2f}",
                "Status": a.status.value,
            }
            for a in accounts
        ]

    def _next_receipt_number(self, year: int) -> str:
        prefix = f"RIC-{year}-"
        used = [n[len(prefix):] for n in self._receipts.numbers_for_year(year) if n.startswith(prefix)]
        last = max((int(n) for n in used if n.isdigit()), default=0)
        return f"{prefix}{last + 1:04d}"

    def _issue_receipt(self, payment_id: str, data: dict, day: date) -> Optional[str]:
        try:
            return self._receipts.create(
                {
                    "receiptNumber": self._next_receipt_number(day.year),
                    "year": day.year,
                    "paymentRecordId": payment_id,
                    **data,
                }
            )
        except Exception:
            # The payment stands; a missing receipt can be reissued by hand.
            logger.warning("Failed to issue receipt for fee payment %s", payment_id, exc_info=True)
            return None

    def record_payment(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        parent_contact: str,
        amount,
        notes: str = "",
        day: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> tuple[str, Optional[str]]:
        """Record a payment and issue its receipt. Returns (payment id, receipt id)."""

        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to record fee payments")

        account = self.get_account(parent_contact)
        value = require_amount(amount)
        if not account.is_exempted and value > account.remaining:
            raise ValidationError(f"The amount cannot exceed the remaining € {account.remaining:.2f}")

        now = now or now_local()
        day = day or now.date()
        data = {
            "parentContact": account.parent_contact,
            "parentName": account.parent_name,
            "amount": value,
            "date": date_key(day),
            "notes": (notes or "").strip(),
            "createdBy": actor.user_id if actor else "",
            "createdAt": now,
        }
        payment_id = self._payments.create(data)
        receipt_id = self._issue_receipt(payment_id, data, day)
        self._log(actor, ActionType.FEE_PAYMENT_CREATED, payment_id, account.parent_name, amount=value)
        return payment_id, receipt_id

    def _require(self, payment_id: str) -> FeePayment:
        p = self._payments.get_by_id(payment_id)
        if not p:
            raise NotFoundError("Payment not found")
        return p

    def update_payment(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        payment_id: str,
        amount,
        now: Optional[datetime] = None,
    ) -> None:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to edit fee payments")

        payment = self._require(payment_id)
        value = require_amount(amount)
        account = self.get_account(payment.parent_contact)
        others = sum(p.amount for p in account.payments if p.payment_id != payment_id)
        if not account.is_exempted and round(others + value, 2) > account.total_amount:
            raise ValidationError(f"Total paid cannot exceed the amount due (€ {account.total_amount:.2f})")

        self._payments.update(payment_id, {"amount": value, "updatedAt": now or now_local()})
        receipt = self._receipts.get_for_payment(payment_id)
        if receipt:
            self._receipts.update(receipt.receipt_id, {"amount": value})
        self._log(actor, ActionType.FEE_PAYMENT_UPDATED, payment_id, payment.parent_name, amount=value)

    def delete_payment(self, *, actor: Optional[Actor], current_role: Role, payment_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can delete fee payments")

        payment = self._require(payment_id)
        self._payments.delete(payment_id)
        receipt = self._receipts.get_for_payment(payment_id)
        if receipt:
            self._receipts.delete(receipt.receipt_id)
        self._log(actor, ActionType.FEE_PAYMENT_DELETED, payment_id, payment.parent_name, amount=payment.amount)

    def set_exemption(self, *, actor: Optional[Actor], current_role: Role, parent_contact: str, exempted: bool) -> None:
        """Exempt a whole family; the flag lives on every child."""

        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to change exemptions")

        account = self.get_account(parent_contact)
        for child in account.children:
            self._users.update_fields(child.user_id, {"payment_exempted": bool(exempted)})
        self._log(
            actor,
            ActionType.FEE_EXEMPTION_CHANGED,
            account.parent_contact,
            account.parent_name,
            exempted=bool(exempted),
        )

    def list_receipts(self, *, search: str = "", day: Optional[date] = None) -> list[Receipt]:
        q = (search or "").strip().lower()
        out = []
        for r in self._receipts.list_all():
            if day and r.date != day:
                continue
            if q and not (
                q in r.parent_name.lower() or q in r.parent_contact.lower() or q in r.receipt_number.lower()
            ):
                continue
            out.append(r)
        return out

    def get_receipt(self, receipt_id: str) -> Receipt:
        r = self._receipts.get_by_id(receipt_id)
        if not r:
            raise NotFoundError("Receipt not found")
        return r
