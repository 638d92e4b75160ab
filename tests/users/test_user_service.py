from __future__ import annotations

import pytest

from src.school_portal.school_portal.action_logs.model import Actor
from src.school_portal.school_portal.core.enums import AccountStatus, Role, TeacherType
from src.school_portal.school_portal.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.school_portal.school_portal.database.bootstrap import ensure_admin_user

ADMIN = Actor(user_id="admin", email="admin@school.test", role="admin")


def _register(container, **overrides):
    args = dict(email="Mario@Example.com", password="secret1", display_name="Mario", role=Role.TEACHER)
    args.update(overrides)
    return container.user_service.register(**args)


def test_register_creates_pending_account(container, identity):
    uid = _register(container)

    user = container.users_repo.get_by_id(uid)
    assert user.email == "mario@example.com"
    assert user.account_status == AccountStatus.PENDING_APPROVAL
    assert user.teacher_type == TeacherType.REGOLARE
    assert uid in identity.accounts
    assert [u.user_id for u in container.user_service.list_pending()] == [uid]


def test_register_validation(container):
    _register(container)

    with pytest.raises(ValidationError):
        _register(container)
    with pytest.raises(ValidationError):
        _register(container, email="other@example.com", role=Role.ADMIN)
    with pytest.raises(ValidationError):
        _register(container, email="not-an-email")
    with pytest.raises(ValidationError):
        _register(container, email="short@example.com", password="123")


def test_pending_account_cannot_log_in_until_approved(container, identity):
    uid = _register(container)
    identity.tokens["tok"] = uid

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("tok")

    container.user_service.approve(actor=ADMIN, current_role=Role.OPERATORE, user_id=uid)
    s_user = container.auth_service.authenticate("tok")

    assert s_user.role == Role.TEACHER
    assert s_user.email == "mario@example.com"

    with pytest.raises(ValidationError):
        container.user_service.approve(actor=ADMIN, current_role=Role.ADMIN, user_id=uid)


def test_authenticate_rejects_bad_tokens(container, identity):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("")
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("unknown")

    identity.tokens["orphan"] = "no-profile"
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("orphan")


def test_only_admin_creates_admins(container):
    with pytest.raises(AuthorizationError):
        container.user_service.create_account(
            actor=None, current_role=Role.OPERATORE, email="a@b.it", password="secret1", display_name="Root", role=Role.ADMIN
        )
    with pytest.raises(AuthorizationError):
        container.user_service.create_account(
            actor=None, current_role=Role.TEACHER, email="a@b.it", password="secret1", display_name="Stud", role=Role.STUDENT
        )

    uid = container.user_service.create_account(
        actor=ADMIN, current_role=Role.OPERATORE, email="s@b.it", password="secret1", display_name="Stud", role=Role.STUDENT
    )
    assert container.user_service.get(uid).is_active


def test_profile_write_failure_removes_auth_account(container, identity, monkeypatch):
    def broken(user):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(container.users_repo, "create_profile", broken)

    with pytest.raises(RuntimeError):
        _register(container)
    assert identity.accounts == {}


def test_change_role_rules(container, make_user):
    make_user("admin", Role.ADMIN)
    make_user("t1", Role.TEACHER)

    with pytest.raises(AuthorizationError):
        container.user_service.change_role(actor=ADMIN, current_role=Role.OPERATORE, user_id="t1", new_role=Role.STUDENT)
    with pytest.raises(ValidationError):
        container.user_service.change_role(actor=ADMIN, current_role=Role.ADMIN, user_id="admin", new_role=Role.STUDENT)

    container.user_service.change_role(actor=ADMIN, current_role=Role.ADMIN, user_id="t1", new_role=Role.OPERATORE)
    assert container.user_service.get("t1").role == Role.OPERATORE


def test_update_profile_self_or_admin(container, make_user):
    make_user("t1", Role.TEACHER)
    make_user("t2", Role.TEACHER)
    me = Actor(user_id="t1", email="t1@school.test", role="teacher")

    container.user_service.update_profile(
        actor=me,
        current_role=Role.TEACHER,
        user_id="t1",
        display_name="Anna B",
        teacher_type=TeacherType.VOLONTARIO,
        available_for_substitution=True,
    )
    user = container.user_service.get("t1")
    assert user.display_name == "Anna B"
    assert user.teacher_type == TeacherType.VOLONTARIO
    assert user.available_for_substitution is True

    with pytest.raises(AuthorizationError):
        container.user_service.update_profile(actor=me, current_role=Role.TEACHER, user_id="t2", display_name="Nope")


def test_delete_user(container, identity, make_user):
    make_user("admin", Role.ADMIN)
    uid = container.user_service.create_account(
        actor=ADMIN, current_role=Role.ADMIN, email="s@b.it", password="secret1", display_name="Stud", role=Role.STUDENT
    )

    with pytest.raises(AuthorizationError):
        container.user_service.delete_user(actor=ADMIN, current_role=Role.OPERATORE, user_id=uid)
    with pytest.raises(ValidationError):
        container.user_service.delete_user(actor=ADMIN, current_role=Role.ADMIN, user_id="admin")

    container.user_service.delete_user(actor=ADMIN, current_role=Role.ADMIN, user_id=uid)

    assert uid not in identity.accounts
    with pytest.raises(NotFoundError):
        container.user_service.get(uid)


def test_ensure_admin_user_is_idempotent(container, identity):
    ensure_admin_user(container.users_repo, container.user_service, email="root@school.test", password="secret1")
    ensure_admin_user(container.users_repo, container.user_service, email="root@school.test", password="secret1")

    admins = container.user_service.list_users(role=Role.ADMIN)
    assert [a.email for a in admins] == ["root@school.test"]
    assert len(identity.accounts) == 1


def test_ensure_admin_user_skips_without_credentials(container, identity, monkeypatch):
    monkeypatch.delenv("ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)

    ensure_admin_user(container.users_repo, container.user_service)

    assert identity.accounts == {}


def test_link_parent_copies_name_and_contact(container, make_user, db):
    make_user("p1", Role.PARENT, name="Maria Rossi", phone_number="333111")
    make_user("p2", Role.PARENT, name="Luca Bianchi")
    make_user("s1", Role.STUDENT)

    container.user_service.link_parent(actor=ADMIN, current_role=Role.OPERATORE, student_id="s1", parent_id="p1")
    student = container.user_service.get("s1")
    assert (student.parent_id, student.parent_name, student.parent_contact) == ("p1", "Maria Rossi", "333111")
    assert [c.user_id for c in container.user_service.list_children("p1")] == ["s1"]

    # Without a phone the email is the contact.
    container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1", parent_id="p2")
    assert container.user_service.get("s1").parent_contact == "p2@school.test"
    assert container.user_service.list_children("p1") == []

    actions = [d["action"] for d in db.collection("actionLogs").docs.values()]
    assert actions.count("parent_linked") == 2


def test_link_parent_validation(container, make_user):
    make_user("p1", Role.PARENT)
    make_user("t1", Role.TEACHER)
    make_user("s1", Role.STUDENT)

    with pytest.raises(AuthorizationError):
        container.user_service.link_parent(actor=None, current_role=Role.TEACHER, student_id="s1", parent_id="p1")
    with pytest.raises(ValidationError):
        container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="t1", parent_id="p1")
    with pytest.raises(ValidationError):
        container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1", parent_id="t1")
    with pytest.raises(NotFoundError):
        container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1", parent_id="nobody")


def test_unlink_parent(container, make_user):
    make_user("p1", Role.PARENT, phone_number="333111")
    make_user("s1", Role.STUDENT)
    container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1", parent_id="p1")

    container.user_service.unlink_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1")

    student = container.user_service.get("s1")
    assert (student.parent_id, student.parent_name, student.parent_contact) == (None, None, None)
    with pytest.raises(ValidationError):
        container.user_service.unlink_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1")


def test_parent_rename_follows_children_but_contact_stays(container, make_user):
    make_user("p1", Role.PARENT, name="Maria Rossi", phone_number="333111")
    make_user("s1", Role.STUDENT)
    container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s1", parent_id="p1")
    me = Actor(user_id="p1", email="p1@school.test", role="parent")

    container.user_service.update_profile(
        actor=me, current_role=Role.PARENT, user_id="p1", display_name="Maria Bianchi", phone_number="333999"
    )

    student = container.user_service.get("s1")
    assert student.parent_name == "Maria Bianchi"
    assert student.parent_contact == "333111"


def test_admin_edits_student_parent_details(container, make_user):
    make_user("s1", Role.STUDENT)

    container.user_service.update_profile(
        actor=ADMIN,
        current_role=Role.ADMIN,
        user_id="s1",
        display_name="Amina",
        parent_name=" Maria Rossi ",
        parent_contact="333111",
    )

    student = container.user_service.get("s1")
    assert (student.parent_name, student.parent_contact) == ("Maria Rossi", "333111")
