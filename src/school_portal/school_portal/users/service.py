from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..action_logs.model import Actor
from ..action_logs.service import ActionLogger
from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_min_length
from ..core.enums import AccountStatus, ActionType, Role, TeacherType
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import has_admin_access
from .model import User
from .repository import IdentityProvider, UserRepository

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = {Role.TEACHER, Role.PARENT, Role.STUDENT}


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: str
    email: str
    display_name: str
    role: Role
    class_id: Optional[str]
    assigned_class_id: Optional[str]


class AuthService:
    """Use case: authenticate user (login) against the hosted auth service."""

    def __init__(self, users: UserRepository, identity: IdentityProvider):
        self._users = users
        self._identity = identity

    def authenticate(self, id_token: str) -> SessionUser:
        if not id_token:
            raise AuthenticationError("Missing sign-in token")

        claims = self._identity.verify_id_token(id_token)
        uid = claims.get("uid") or claims.get("user_id")
        if not uid:
            raise AuthenticationError("Invalid sign-in token")

        user = self._users.get_by_id(uid)
        if not user:
            raise AuthenticationError("No profile found for this account")
        if not user.is_active:
            raise AuthenticationError("Your account is waiting for approval")

        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            display_name=user.display_name,
            role=user.role,
            class_id=user.class_id,
            assigned_class_id=user.assigned_class_id,
        )


class UserService:
    """Use case: manage users (admin)."""

    def __init__(
        self,
        users: UserRepository,
        identity: IdentityProvider,
        action_logger: Optional[ActionLogger] = None,
    ):
        self._users = users
        self._identity = identity
        self._action_logger = action_logger

    def _log(self, actor: Optional[Actor], action: ActionType, user: User, **details) -> None:
        if self._action_logger:
            self._action_logger.log_action(
                actor,
                action,
                target_type="user",
                target_id=user.user_id,
                target_name=user.display_name,
                details=details or None,
            )

    def _new_account(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        role: Role,
        status: AccountStatus,
        teacher_type: Optional[TeacherType] = None,
        phone_number: Optional[str] = None,
    ) -> User:
        email = require_email(email)
        display_name = require_min_length(display_name, "Display name", 2)
        require_min_length(password, "Password", 6)

        if self._users.get_by_email(email):
            raise ValidationError("A user with this email already exists")

        uid = self._identity.create_account(email=email, password=password, display_name=display_name)
        user = User(
            user_id=uid,
            email=email,
            display_name=display_name,
            role=role,
            account_status=status,
            teacher_type=teacher_type if role == Role.TEACHER else None,
            phone_number=(phone_number or "").strip() or None,
            created_at=now_local(),
        )
        try:
            self._users.create_profile(user)
        except Exception:
            # Keep auth and profile in step: an auth account without profile cannot log in.
            logger.exception("Profile write failed for %s, removing auth account", email)
            self._identity.delete_account(uid)
            raise
        return user

    def create_account(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        email: str,
        password: str,
        display_name: str,
        role: Role,
        teacher_type: Optional[TeacherType] = None,
        phone_number: Optional[str] = None,
    ) -> str:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to create users")
        if role == Role.ADMIN and current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can create another admin")

        user = self._new_account(
            email=email,
            password=password,
            display_name=display_name,
            role=role,
            status=AccountStatus.ACTIVE,
            teacher_type=teacher_type,
            phone_number=phone_number,
        )
        self._log(actor, ActionType.USER_CREATED, user, role=role.value)
        return user.user_id

    def register(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        role: Role,
        phone_number: Optional[str] = None,
    ) -> str:
        """Self-registration; the account waits for an admin to approve it."""

        if role not in SELF_REGISTER_ROLES:
            raise ValidationError("This account type cannot be self-registered")

        user = self._new_account(
            email=email,
            password=password,
            display_name=display_name,
            role=role,
            status=AccountStatus.PENDING_APPROVAL,
            teacher_type=TeacherType.REGOLARE if role == Role.TEACHER else None,
            phone_number=phone_number,
        )
        return user.user_id

    def _require(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def approve(self, *, actor: Optional[Actor], current_role: Role, user_id: str) -> None:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to approve accounts")

        user = self._require(user_id)
        if user.is_active:
            raise ValidationError("Account is already active")

        self._users.update_fields(user_id, {"account_status": AccountStatus.ACTIVE})
        self._log(actor, ActionType.USER_APPROVED, user)

    def change_role(self, *, actor: Optional[Actor], current_role: Role, user_id: str, new_role: Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only an admin can change roles")

        user = self._require(user_id)
        if actor is not None and actor.user_id == user_id:
            raise ValidationError("You cannot change your own role")
        if user.role == new_role:
            return

        self._users.update_fields(user_id, {"role": new_role})
        self._log(actor, ActionType.USER_ROLE_CHANGED, user, old_role=user.role.value, new_role=new_role.value)

    def update_profile(
        self,
        *,
        actor: Optional[Actor],
        current_role: Role,
        user_id: str,
        display_name: str,
        phone_number: Optional[str] = None,
        teacher_type: Optional[TeacherType] = None,
        available_for_substitution: Optional[bool] = None,
        parent_name: Optional[str] = None,
        parent_contact: Optional[str] = None,
    ) -> None:
        is_self = actor is not None and actor.user_id == user_id
        if not is_self and not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to edit this profile")

        user = self._require(user_id)
        fields: dict = {
            "display_name": require_min_length(display_name, "Display name", 2),
            "phone_number": (phone_number or "").strip() or None,
        }
        if user.role == Role.TEACHER:
            if teacher_type is not None:
                fields["teacher_type"] = teacher_type
            if available_for_substitution is not None:
                fields["available_for_substitution"] = bool(available_for_substitution)
        if user.role == Role.STUDENT and not is_self:
            if parent_name is not None:
                fields["parent_name"] = parent_name.strip() or None
            if parent_contact is not None:
                fields["parent_contact"] = parent_contact.strip() or None

        self._users.update_fields(user_id, fields)
        if user.role == Role.PARENT:
            self._sync_children(user.user_id, fields["display_name"])
        self._log(actor, ActionType.USER_UPDATED, user)

    def _sync_children(self, parent_id: str, parent_name: str) -> None:
        # parentContact keys the family fee records, so only the name follows the profile.
        for child in self._users.list_children(parent_id):
            self._users.update_fields(child.user_id, {"parent_name": parent_name})

    def link_parent(self, *, actor: Optional[Actor], current_role: Role, student_id: str, parent_id: str) -> None:
        """Attach a student to a parent account; the parent's name and contact are copied onto the student."""

        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to link parents")

        student = self._require(student_id)
        if student.role != Role.STUDENT:
            raise ValidationError("Only students can be linked to a parent")
        parent = self._require(parent_id)
        if parent.role != Role.PARENT:
            raise ValidationError("Selected user is not a parent")

        self._users.update_fields(
            student_id,
            {"parent_id": parent.user_id, "parent_name": parent.display_name, "parent_contact": parent.contact},
        )
        self._log(actor, ActionType.PARENT_LINKED, student, parent_id=parent.user_id)

    def unlink_parent(self, *, actor: Optional[Actor], current_role: Role, student_id: str) -> None:
        if not has_admin_access(current_role):
            raise AuthorizationError("You are not allowed to unlink parents")

        student = self._require(student_id)
        if not student.parent_id:
            raise ValidationError("This student has no linked parent")

        self._users.update_fields(student_id, {"parent_id": None, "parent_name": None, "parent_contact": None})
        self._log(actor, ActionType.PARENT_UNLINKED, student, parent_id=student.parent_id)

    def delete_user(self, *, actor: Optional[Actor], current_role: Role, user_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You are not allowed to delete users")

        user = self._require(user_id)
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("Deleting the user failed")
        self._identity.delete_account(user_id)
        self._log(actor, ActionType.USER_DELETED, user)

    def get(self, user_id: str) -> User:
        return self._require(user_id)

    def list_users(self, *, role: Optional[Role] = None) -> Sequence[User]:
        return self._users.list_users(role=role, status=AccountStatus.ACTIVE)

    def list_pending(self, *, role: Optional[Role] = None) -> Sequence[User]:
        return self._users.list_users(role=role, status=AccountStatus.PENDING_APPROVAL)

    def list_teachers(self) -> Sequence[User]:
        return self.list_users(role=Role.TEACHER)

    def list_students(self) -> Sequence[User]:
        return self.list_users(role=Role.STUDENT)

    def list_parents(self) -> Sequence[User]:
        return self.list_users(role=Role.PARENT)

    def list_children(self, parent_id: str) -> Sequence[User]:
        return self._users.list_children(parent_id)
