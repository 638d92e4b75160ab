from __future__ import annotations

import io
from datetime import date, datetime

import pytest

from src.school_portal.school_portal.core.enums import Role
from src.school_portal.school_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def lesson(container, make_user):
    teacher = make_user("t1", Role.TEACHER, name="Anna")
    make_user("t2", Role.TEACHER, name="Bilal")
    a = container.class_service.create_class(actor=None, current_role=Role.ADMIN, name="A", teacher_id="t1")
    b = container.class_service.create_class(actor=None, current_role=Role.ADMIN, name="B")
    lesson_id = container.lesson_service.create_lesson(
        current_user=teacher,
        title="Lettere solari",
        description="Introduzione",
        class_id=a,
        day=date(2026, 2, 7),
        topics="alfabeto, pronuncia, ",
        now=datetime(2026, 2, 7, 15, 0),
    )
    return teacher, a, b, lesson_id


def _material(container, teacher, class_id):
    [material_id] = container.material_service.upload(
        current_user=teacher,
        title="Scheda",
        description="Scheda lettere",
        class_ids=[class_id],
        filename="scheda.pdf",
        stream=io.BytesIO(b"pdf"),
        size=3,
    )
    return material_id


def _homework(container, teacher, class_id):
    return container.homework_service.create_homework(
        current_user=teacher,
        title="Esercizi",
        description="Esercizi sulle lettere solari",
        class_id=class_id,
        due_date=date(2026, 2, 14),
    )


def test_create_lesson_parses_topics(container, lesson):
    _, a, _, lesson_id = lesson

    [found] = container.lesson_service.list_for_class(a)

    assert found.lesson_id == lesson_id
    assert found.topics == ("alfabeto", "pronuncia")
    assert found.date == date(2026, 2, 7)


def test_create_lesson_validation(container, lesson):
    teacher, a, _, _ = lesson

    with pytest.raises(ValidationError):
        container.lesson_service.create_lesson(current_user=teacher, title="X", description="", class_id=a, day=None)
    with pytest.raises(NotFoundError):
        container.lesson_service.create_lesson(
            current_user=teacher, title="X", description="", class_id="missing", day=date(2026, 2, 7)
        )


def test_attach_material_and_homework(container, lesson):
    teacher, a, _, lesson_id = lesson
    material_id = _material(container, teacher, a)
    homework_id = _homework(container, teacher, a)

    container.lesson_service.attach_material(current_user=teacher, lesson_id=lesson_id, material_id=material_id)
    container.lesson_service.attach_material(current_user=teacher, lesson_id=lesson_id, material_id=material_id)
    container.lesson_service.attach_homework(current_user=teacher, lesson_id=lesson_id, homework_id=homework_id)

    details = container.lesson_service.lesson_details(lesson_id)
    assert details.lesson.materials == (material_id,)
    assert [m.material_id for m in details.materials] == [material_id]
    assert [h.homework_id for h in details.homeworks] == [homework_id]
    assert container.material_service.get(material_id).lesson_id == lesson_id


def test_attach_from_other_class_is_rejected(container, lesson):
    teacher, _, b, lesson_id = lesson
    material_id = _material(container, teacher, b)
    homework_id = _homework(container, teacher, b)

    with pytest.raises(ValidationError):
        container.lesson_service.attach_material(current_user=teacher, lesson_id=lesson_id, material_id=material_id)
    with pytest.raises(ValidationError):
        container.lesson_service.attach_homework(current_user=teacher, lesson_id=lesson_id, homework_id=homework_id)


def test_only_author_edits_lesson(container, lesson):
    teacher, _, _, lesson_id = lesson
    other = container.users_repo.get_by_id("t2")

    with pytest.raises(AuthorizationError):
        container.lesson_service.update_lesson(
            current_user=other, lesson_id=lesson_id, title="X", description="", day=None
        )

    container.lesson_service.update_lesson(
        current_user=teacher, lesson_id=lesson_id, title="Lettere lunari", description="", day=date(2026, 2, 8)
    )
    updated = container.lesson_service.lesson_details(lesson_id).lesson
    assert updated.title == "Lettere lunari"
    assert updated.date == date(2026, 2, 8)

    container.lesson_service.delete_lesson(current_user=teacher, lesson_id=lesson_id)
    with pytest.raises(NotFoundError):
        container.lesson_service.lesson_details(lesson_id)
