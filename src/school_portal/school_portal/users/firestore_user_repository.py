from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Sequence

from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.enums import AccountStatus, Role, TeacherType
from ..database.firestore_base import as_datetime, compact, snapshot_to_dict, stream_dicts, unique
from .model import User
from .repository import UserRepository

COLLECTION = "users"

_FIELDS = {
    "email": "email",
    "display_name": "displayName",
    "role": "role",
    "account_status": "accountStatus",
    "class_id": "classId",
    "assigned_class_id": "assignedClassId",
    "teacher_type": "teacherType",
    "available_for_substitution": "availableForSubstitution",
    "temporary_classes": "temporaryClasses",
    "phone_number": "phoneNumber",
    "parent_id": "parentId",
    "parent_name": "parentName",
    "parent_contact": "parentContact",
    "payment_exempted": "paymentExempted",
    "created_at": "createdAt",
}


def _to_store(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return list(value)
    return value


def user_from_doc(d: dict) -> User:
    teacher_type = d.get("teacherType")
    return User(
        user_id=d["id"],
        email=d.get("email", ""),
        display_name=d.get("displayName") or d.get("email", ""),
        role=Role(d.get("role", Role.STUDENT.value)),
        account_status=AccountStatus(d.get("accountStatus") or AccountStatus.ACTIVE.value),
        class_id=d.get("classId"),
        assigned_class_id=d.get("assignedClassId"),
        teacher_type=TeacherType(teacher_type) if teacher_type else None,
        available_for_substitution=bool(d.get("availableForSubstitution", False)),
        temporary_classes=tuple(d.get("temporaryClasses") or ()),
        phone_number=d.get("phoneNumber"),
        parent_id=d.get("parentId"),
        parent_name=d.get("parentName"),
        parent_contact=d.get("parentContact"),
        payment_exempted=bool(d.get("paymentExempted", False)),
        created_at=as_datetime(d.get("createdAt")),
    )


class FirestoreUserRepository(UserRepository):
    def __init__(self, db):
        self._db = db

    def _col(self):
        return self._db.collection(COLLECTION)

    def get_by_id(self, user_id: str) -> Optional[User]:
        d = snapshot_to_dict(self._col().document(user_id).get())
        return user_from_doc(d) if d else None

    def get_by_email(self, email: str) -> Optional[User]:
        rows = stream_dicts(self._col().where(filter=FieldFilter("email", "==", email)).limit(1))
        return user_from_doc(rows[0]) if rows else None

    def get_many(self, user_ids: Sequence[str]) -> Sequence[User]:
        ids = unique(user_ids)
        if not ids:
            return []
        refs = [self._col().document(uid) for uid in ids]
        out = []
        for snap in self._db.get_all(refs):
            d = snapshot_to_dict(snap)
            if d:
                out.append(user_from_doc(d))
        return out

    def create_profile(self, user: User) -> str:
        data = {_FIELDS[k]: _to_store(getattr(user, k)) for k in _FIELDS}
        self._col().document(user.user_id).set(compact(data))
        return user.user_id

    def update_fields(self, user_id: str, fields: dict) -> bool:
        ref = self._col().document(user_id)
        if not ref.get().exists:
            return False
        ref.update({_FIELDS[k]: _to_store(v) for k, v in fields.items()})
        return True

    def delete_by_id(self, user_id: str) -> bool:
        ref = self._col().document(user_id)
        if not ref.get().exists:
            return False
        ref.delete()
        return True

    def list_children(self, parent_id: str) -> Sequence[User]:
        q = self._col().where(filter=FieldFilter("parentId", "==", parent_id))
        children = [user_from_doc(d) for d in stream_dicts(q)]
        children.sort(key=lambda u: u.display_name.lower())
        return children

    def list_users(
        self,
        *,
        role: Optional[Role] = None,
        status: Optional[AccountStatus] = None,
    ) -> Sequence[User]:
        q = self._col()
        if role is not None:
            q = q.where(filter=FieldFilter("role", "==", role.value))
        if status is not None:
            q = q.where(filter=FieldFilter("accountStatus", "==", status.value))
        users = [user_from_doc(d) for d in stream_dicts(q)]
        users.sort(key=lambda u: u.display_name.lower())
        return users
