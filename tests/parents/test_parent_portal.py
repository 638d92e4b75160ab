from __future__ import annotations

from datetime import date, datetime

import pytest

from src.school_portal.school_portal.action_logs.model import Actor
from src.school_portal.school_portal.attendance.model import AttendanceEntry
from src.school_portal.school_portal.core.enums import AttendanceStatus, FeeStatus, Role
from src.school_portal.school_portal.core.exceptions import AuthorizationError, NotFoundError

ADMIN = Actor(user_id="admin", email="admin@school.test", role="admin")


@pytest.fixture
def family(container, make_user):
    teacher = make_user("t1", Role.TEACHER, name="Anna")
    parent = make_user("p1", Role.PARENT, name="Maria Rossi", phone_number="333111")
    make_user("p2", Role.PARENT, name="Luca Bianchi")
    make_user("s1", Role.STUDENT, name="Amina")
    make_user("s2", Role.STUDENT, name="Omar")
    make_user("s3", Role.STUDENT, name="Sara")

    class_id = container.class_service.create_class(
        actor=None, current_role=Role.ADMIN, name="Arabo 1", teacher_id="t1"
    )
    container.class_service.set_students(
        actor=None, current_role=Role.ADMIN, class_id=class_id, student_ids=["s1", "s3"]
    )
    for sid in ("s1", "s2"):
        container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id=sid, parent_id="p1")
    container.user_service.link_parent(actor=ADMIN, current_role=Role.ADMIN, student_id="s3", parent_id="p2")

    graded = container.homework_service.create_homework(
        current_user=teacher,
        title="Alfabeto",
        description="Scrivere le prime dieci lettere",
        class_id=class_id,
        due_date=date(2026, 2, 14),
        now=datetime(2026, 2, 7, 16, 0),
    )
    container.homework_service.create_homework(
        current_user=teacher,
        title="Numeri",
        description="Contare fino a venti",
        class_id=class_id,
        due_date=date(2026, 2, 21),
        now=datetime(2026, 2, 7, 16, 0),
    )
    sub_id = container.homework_service.submit(
        student=container.users_repo.get_by_id("s1"), homework_id=graded, text="Ecco il compito"
    )
    container.homework_service.grade(current_user=teacher, submission_id=sub_id, grade="8", feedback="Brava")

    container.lesson_service.create_lesson(
        current_user=teacher,
        title="Lettere solari",
        description="Introduzione",
        class_id=class_id,
        day=date(2026, 2, 7),
        topics="alfabeto",
        now=datetime(2026, 2, 7, 15, 0),
    )
    container.attendance_service.record_class_attendance(
        current_user=teacher,
        class_id=class_id,
        day=date(2026, 2, 7),
        entries=[AttendanceEntry("s1", AttendanceStatus.PRESENT), AttendanceEntry("s3", AttendanceStatus.ABSENT)],
        now=datetime(2026, 2, 7, 16, 0),
    )
    return container.users_repo.get_by_id("p1"), class_id


def test_children_are_the_linked_students(container, family):
    parent, _ = family

    children = container.parent_service.children(parent)

    assert [c.display_name for c in children] == ["Amina", "Omar"]


def test_child_overview(container, family):
    parent, class_id = family

    overview = container.parent_service.child_overview(parent, "s1")

    assert overview.school_class.class_id == class_id
    states = {h.homework.title: h.state(date(2026, 2, 16)) for h in overview.homework}
    assert states == {"Alfabeto": "graded", "Numeri": "to do"}
    assert [h.grade for h in overview.grades] == [8.0]
    assert overview.average_grade == 8.0
    assert [lesson.title for lesson in overview.lessons] == ["Lettere solari"]
    assert [r.status for r in overview.attendance] == [AttendanceStatus.PRESENT]
    assert overview.summary.presence_rate == 100.0
    assert overview.family.parent_contact == "333111"
    assert overview.family.status == FeeStatus.UNPAID
    assert overview.family.total_amount == 220.0


def test_child_without_class_has_empty_lists(container, family):
    parent, _ = family

    overview = container.parent_service.child_overview(parent, "s2")

    assert overview.school_class is None
    assert overview.homework == []
    assert overview.lessons == []
    assert overview.average_grade is None


def test_parent_cannot_open_another_family_child(container, family):
    parent, _ = family

    with pytest.raises(AuthorizationError):
        container.parent_service.child_overview(parent, "s3")
    with pytest.raises(NotFoundError):
        container.parent_service.child_overview(parent, "t1")


def test_only_parents_use_the_parent_area(container, family):
    teacher = container.users_repo.get_by_id("t1")

    with pytest.raises(AuthorizationError):
        container.parent_service.children(teacher)


def test_pending_homework_counts_unsubmitted_work(container, family):
    parent, _ = family

    assert container.parent_service.pending_homework(parent) == 1
