"""Role x resource permission matrix.

Pages consult this table to decide what to render and services use it to guard
writes, so the two never disagree.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .enums import Role


@dataclass(frozen=True)
class Permission:
    can_view: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_create: bool = False


RESOURCES = (
    "users",
    "students",
    "teachers",
    "classes",
    "payments",
    "homework",
    "lessons",
    "materials",
    "attendance",
    "grades",
    "substitutions",
    "action_logs",
)

_FULL = Permission(True, True, True, True)
_NONE = Permission()
_VIEW = Permission(can_view=True)
_NO_DELETE = Permission(True, True, False, True)
_TEACHING = Permission(True, True, True, True)


def _table(default: Permission, **overrides: Permission) -> Dict[str, Permission]:
    table = {r: default for r in RESOURCES}
    table.update(overrides)
    return table


_ROLE_PERMISSIONS: Dict[Role, Dict[str, Permission]] = {
    Role.ADMIN: _table(_FULL),
    Role.OPERATORE: _table(
        _NO_DELETE,
        users=Permission(True, True, False, False),
        teachers=Permission(True, True, False, False),
        action_logs=_NONE,
    ),
    Role.TEACHER: _table(
        _NONE,
        students=_VIEW,
        classes=Permission(True, True, False, False),
        homework=_TEACHING,
        lessons=_TEACHING,
        materials=_TEACHING,
        attendance=_NO_DELETE,
        grades=_NO_DELETE,
        substitutions=Permission(True, False, False, True),
    ),
    Role.STUDENT: _table(
        _NONE,
        classes=_VIEW,
        homework=_VIEW,
        lessons=_VIEW,
        materials=_VIEW,
        attendance=_VIEW,
        grades=_VIEW,
    ),
    Role.PARENT: _table(
        _NONE,
        students=_VIEW,
        classes=_VIEW,
        payments=_VIEW,
        homework=_VIEW,
        lessons=_VIEW,
        materials=_VIEW,
        attendance=_VIEW,
        grades=_VIEW,
    ),
}


def get_permission(role: Role, resource: str) -> Permission:
    return _ROLE_PERMISSIONS.get(role, {}).get(resource, _NONE)


def can_view(role: Role, resource: str) -> bool:
    return get_permission(role, resource).can_view


def can_edit(role: Role, resource: str) -> bool:
    return get_permission(role, resource).can_edit


def can_delete(role: Role, resource: str) -> bool:
    return get_permission(role, resource).can_delete


def can_create(role: Role, resource: str) -> bool:
    return get_permission(role, resource).can_create


def has_admin_access(role: Role) -> bool:
    """Admin and operatore share the back-office pages."""
    return role in (Role.ADMIN, Role.OPERATORE)
