from __future__ import annotations

import io
from datetime import datetime

import pytest

from src.school_portal.school_portal.core.constants import MAX_UPLOAD_BYTES
from src.school_portal.school_portal.core.enums import Role
from src.school_portal.school_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError

NOW = datetime(2026, 2, 7, 16, 0)


@pytest.fixture
def classes(container, make_user):
    make_user("t1", Role.TEACHER, name="Anna")
    make_user("t2", Role.TEACHER, name="Bilal")
    make_user("s1", Role.STUDENT)
    a = container.class_service.create_class(actor=None, current_role=Role.ADMIN, name="A", teacher_id="t1")
    b = container.class_service.create_class(actor=None, current_role=Role.ADMIN, name="B")
    return a, b


def _upload(container, class_ids, user_id="t1", **overrides):
    args = dict(
        current_user=container.users_repo.get_by_id(user_id),
        title="Alfabeto",
        description="Scheda lettere",
        class_ids=class_ids,
        filename="../scheda lettere.pdf",
        stream=io.BytesIO(b"%PDF-1.4"),
        size=8,
        content_type="application/pdf",
        now=NOW,
    )
    args.update(overrides)
    return container.material_service.upload(**args)


def test_upload_once_for_many_classes(container, storage, classes):
    a, b = classes

    ids = _upload(container, [a, b])

    assert len(ids) == 2
    assert len(storage.files) == 1
    [path] = storage.files
    assert path.endswith("_scheda_lettere.pdf")
    first = container.material_service.get(ids[0])
    second = container.material_service.get(ids[1])
    assert first.file_url == second.file_url
    assert {first.class_id, second.class_id} == {a, b}
    assert [m.material_id for m in container.material_service.list_for_class(b)] == [second.material_id]


def test_upload_validation(container, storage, classes):
    a, _ = classes

    with pytest.raises(ValidationError):
        _upload(container, [])
    with pytest.raises(ValidationError):
        _upload(container, [a], size=MAX_UPLOAD_BYTES + 1)
    with pytest.raises(ValidationError):
        _upload(container, [a], filename="")
    with pytest.raises(NotFoundError):
        _upload(container, [a, "missing"])
    with pytest.raises(AuthorizationError):
        _upload(container, [a], user_id="s1")
    assert storage.files == {}


def test_shared_file_is_kept_until_last_copy_is_deleted(container, storage, classes):
    a, b = classes
    first, second = _upload(container, [a, b])
    owner = container.users_repo.get_by_id("t1")

    container.material_service.delete(current_user=owner, material_id=first)
    assert len(storage.files) == 1

    container.material_service.delete(current_user=owner, material_id=second)
    assert storage.files == {}


def test_teachers_change_only_their_materials(container, classes):
    a, _ = classes
    [material_id] = _upload(container, [a])
    other = container.users_repo.get_by_id("t2")
    owner = container.users_repo.get_by_id("t1")

    with pytest.raises(AuthorizationError):
        container.material_service.delete(current_user=other, material_id=material_id)
    with pytest.raises(AuthorizationError):
        container.material_service.update(current_user=other, material_id=material_id, title="X", description="Y")

    container.material_service.update(
        current_user=owner, material_id=material_id, title="Alfabeto 2", description="Nuova scheda"
    )
    assert container.material_service.get(material_id).title == "Alfabeto 2"
