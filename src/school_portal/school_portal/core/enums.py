from __future__ import annotations

from datetime import time
from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    OPERATORE = "operatore"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    PENDING_APPROVAL = "pending_approval"


class TeacherType(str, Enum):
    REGOLARE = "insegnante_regolare"
    VOLONTARIO = "insegnante_volontario"
    ASSISTENTE = "assistente"


class Turno(str, Enum):
    """Weekly time slot a class meets in."""

    SABATO_POMERIGGIO = "sabato pomeriggio"
    SABATO_SERA = "sabato sera"
    DOMENICA_MATTINA = "domenica mattina"
    DOMENICA_POMERIGGIO = "domenica pomeriggio"

    @property
    def weekday(self) -> int:
        """Python weekday (Monday=0) the slot falls on."""
        if self in (Turno.SABATO_POMERIGGIO, Turno.SABATO_SERA):
            return 5
        return 6

    @property
    def start_time(self) -> time:
        return _TURNO_START[self]

    @property
    def label(self) -> str:
        return self.value.title()


_TURNO_START = {
    Turno.SABATO_POMERIGGIO: time(15, 0),
    Turno.SABATO_SERA: time(18, 0),
    Turno.DOMENICA_MATTINA: time(9, 30),
    Turno.DOMENICA_POMERIGGIO: time(15, 0),
}


class AttendanceStatus(str, Enum):
    """Student attendance stored per class and date."""

    PRESENT = "present"
    ABSENT = "absent"
    JUSTIFIED = "justified"


class CheckInStatus(str, Enum):
    """Teacher check-in state."""

    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    LATE = "late"


class SubstitutionStatus(str, Enum):
    ASSIGNED = "assigned"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class HomeworkStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    GRADED = "graded"


class TeacherPaymentType(str, Enum):
    SALARY = "salary"
    BONUS = "bonus"
    REIMBURSEMENT = "reimbursement"
    OTHER = "other"


class FeeStatus(str, Enum):
    """Where a family stands with the yearly fee."""

    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"
    EXEMPTED = "exempted"


class ActionType(str, Enum):
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    USER_APPROVED = "user_approved"
    USER_REJECTED = "user_rejected"
    USER_ROLE_CHANGED = "user_role_changed"
    USER_STATUS_CHANGED = "user_status_changed"

    STUDENT_ENROLLED = "student_enrolled"
    STUDENT_UNENROLLED = "student_unenrolled"
    PARENT_LINKED = "parent_linked"
    PARENT_UNLINKED = "parent_unlinked"

    CLASS_CREATED = "class_created"
    CLASS_UPDATED = "class_updated"
    CLASS_DELETED = "class_deleted"
    CLASS_ASSIGNED = "class_assigned"
    CLASS_UNASSIGNED = "class_unassigned"

    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_DELETED = "payment_deleted"

    FEE_PAYMENT_CREATED = "fee_payment_created"
    FEE_PAYMENT_UPDATED = "fee_payment_updated"
    FEE_PAYMENT_DELETED = "fee_payment_deleted"
    FEE_EXEMPTION_CHANGED = "fee_exemption_changed"

    LOGIN = "login"
    LOGOUT = "logout"

    DATA_EXPORT = "data_export"
