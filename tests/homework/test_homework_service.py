from __future__ import annotations

from datetime import date, datetime

import pytest

from src.school_portal.school_portal.core.enums import Role, SubmissionStatus
from src.school_portal.school_portal.core.exceptions import AuthorizationError, ValidationError


@pytest.fixture
def homework(container, make_user):
    teacher = make_user("t1", Role.TEACHER, name="Anna")
    make_user("t2", Role.TEACHER, name="Bilal")
    make_user("s1", Role.STUDENT)
    make_user("s2", Role.STUDENT)
    class_id = container.class_service.create_class(
        actor=None, current_role=Role.ADMIN, name="Arabo 1", teacher_id="t1"
    )
    container.class_service.set_students(actor=None, current_role=Role.ADMIN, class_id=class_id, student_ids=["s1"])
    hw_id = container.homework_service.create_homework(
        current_user=teacher,
        title="Alfabeto",
        description="Scrivere le prime dieci lettere",
        class_id=class_id,
        due_date=date(2026, 2, 14),
        attachment_urls=["https://files.test/a.pdf", "  "],
        now=datetime(2026, 2, 7, 16, 0),
    )
    return class_id, hw_id


def test_create_homework(container, homework):
    class_id, hw_id = homework

    hw = container.homework_service.get(hw_id)

    assert hw.class_name == "Arabo 1"
    assert hw.due_date == date(2026, 2, 14)
    assert hw.attachment_urls == ("https://files.test/a.pdf",)
    assert [h.homework_id for h in container.homework_service.list_for_class(class_id)] == [hw_id]


def test_create_homework_validation(container, homework, make_user):
    class_id, _ = homework
    teacher = container.users_repo.get_by_id("t1")
    student = container.users_repo.get_by_id("s1")

    with pytest.raises(ValidationError):
        container.homework_service.create_homework(
            current_user=teacher, title="Al", description="long enough text", class_id=class_id, due_date=date.today()
        )
    with pytest.raises(ValidationError):
        container.homework_service.create_homework(
            current_user=teacher, title="Alfabeto", description="short", class_id=class_id, due_date=date.today()
        )
    with pytest.raises(AuthorizationError):
        container.homework_service.create_homework(
            current_user=student, title="Alfabeto", description="long enough text", class_id=class_id, due_date=date.today()
        )


def test_enrolled_student_submits_once(container, homework):
    _, hw_id = homework
    student = container.users_repo.get_by_id("s1")

    container.homework_service.submit(student=student, homework_id=hw_id, text="Ecco il compito")

    subs = container.homework_service.list_submissions(hw_id)
    assert len(subs) == 1
    assert subs[0].status == SubmissionStatus.SUBMITTED
    assert subs[0].submission_text == "Ecco il compito"

    with pytest.raises(ValidationError):
        container.homework_service.submit(student=student, homework_id=hw_id, text="again")


def test_submission_needs_content_and_enrolment(container, homework):
    _, hw_id = homework
    enrolled = container.users_repo.get_by_id("s1")
    outsider = container.users_repo.get_by_id("s2")

    with pytest.raises(ValidationError):
        container.homework_service.submit(student=enrolled, homework_id=hw_id, text=" ", urls=[""])
    with pytest.raises(AuthorizationError):
        container.homework_service.submit(student=outsider, homework_id=hw_id, text="hi")


def test_grade_range_and_ownership(container, homework):
    _, hw_id = homework
    student = container.users_repo.get_by_id("s1")
    owner = container.users_repo.get_by_id("t1")
    other = container.users_repo.get_by_id("t2")
    sub_id = container.homework_service.submit(student=student, homework_id=hw_id, urls=["https://files.test/s1.jpg"])

    for bad in ("11", -1, "dieci"):
        with pytest.raises(ValidationError):
            container.homework_service.grade(current_user=owner, submission_id=sub_id, grade=bad)
    with pytest.raises(AuthorizationError):
        container.homework_service.grade(current_user=other, submission_id=sub_id, grade=8)
    with pytest.raises(AuthorizationError):
        container.homework_service.grade(current_user=student, submission_id=sub_id, grade=8)

    container.homework_service.grade(current_user=owner, submission_id=sub_id, grade="8.5", feedback=" Bravo ")

    graded = container.homework_service.submissions_by_student("s1")[hw_id]
    assert graded.is_graded
    assert graded.grade == 8.5
    assert graded.feedback == "Bravo"
    assert graded.graded_by == "t1"


def test_delete_homework_removes_submissions(container, homework, db):
    _, hw_id = homework
    student = container.users_repo.get_by_id("s1")
    container.homework_service.submit(student=student, homework_id=hw_id, text="done")
    other = container.users_repo.get_by_id("t2")
    owner = container.users_repo.get_by_id("t1")

    with pytest.raises(AuthorizationError):
        container.homework_service.delete_homework(current_user=other, homework_id=hw_id)

    container.homework_service.delete_homework(current_user=owner, homework_id=hw_id)

    assert db.collection("homework").docs == {}
    assert container.homework_service.submissions_by_student("s1") == {}
