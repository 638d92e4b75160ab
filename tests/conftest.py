"""In-memory stand-ins for Firestore, Firebase Auth and Cloud Storage.

The fake client implements just the query surface the repositories use, so the
real Firestore repositories are exercised end to end without a project.
"""
from __future__ import annotations

import copy
import itertools
from datetime import datetime

import pytest
from google.cloud.firestore_v1.transforms import ArrayUnion

from src.school_portal.school_portal.action_logs.firestore_action_log_repository import FirestoreActionLogRepository
from src.school_portal.school_portal.attendance.firestore_attendance_repository import FirestoreAttendanceRepository
from src.school_portal.school_portal.checkins.firestore_checkin_repository import FirestoreCheckInRepository
from src.school_portal.school_portal.classes.firestore_class_repository import FirestoreClassRepository
from src.school_portal.school_portal.container import build_container
from src.school_portal.school_portal.core.enums import AccountStatus, Role, TeacherType
from src.school_portal.school_portal.core.exceptions import AuthenticationError
from src.school_portal.school_portal.fees.firestore_fee_repository import FirestoreFeePaymentRepository, FirestoreReceiptRepository
from src.school_portal.school_portal.homework.firestore_homework_repository import (
    FirestoreHomeworkRepository,
    FirestoreSubmissionRepository,
)
from src.school_portal.school_portal.lessons.firestore_lesson_repository import FirestoreLessonRepository
from src.school_portal.school_portal.materials.firestore_material_repository import FirestoreMaterialRepository
from src.school_portal.school_portal.notifications.firestore_notification_repository import (
    FirestoreNotificationRepository,
)
from src.school_portal.school_portal.payments.firestore_payment_repository import FirestorePaymentRepository
from src.school_portal.school_portal.substitutions.firestore_substitution_repository import (
    FirestoreSubstitutionRepository,
)
from src.school_portal.school_portal.users.firestore_user_repository import FirestoreUserRepository
from src.school_portal.school_portal.users.model import User

NOW = datetime(2026, 2, 7, 15, 0, 0)

_OPS = {
    "==": lambda a, b: a == b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "array_contains": lambda a, b: b in (a or []),
}


def _apply(current, value):
    if isinstance(value, ArrayUnion):
        merged = list(current or [])
        merged.extend(v for v in value.values if v not in merged)
        return merged
    return copy.deepcopy(value)


class FakeSnapshot:
    def __init__(self, ref, data):
        self.reference = ref
        self.id = ref.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    @property
    def _store(self):
        return self._collection.docs

    def get(self):
        return FakeSnapshot(self, self._store.get(self.id))

    def set(self, data):
        self._store[self.id] = copy.deepcopy(data)

    def update(self, data):
        if self.id not in self._store:
            raise KeyError(f"No document to update: {self.id}")
        doc = self._store[self.id]
        for k, v in data.items():
            doc[k] = _apply(doc.get(k), v)

    def delete(self):
        self._store.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, limit=None):
        self._collection = collection
        self._filters = list(filters)
        self._order = order
        self._limit = limit

    def where(self, *, filter):
        check = (filter.field_path, _OPS[filter.op_string], filter.value)
        return FakeQuery(self._collection, [*self._filters, check], self._order, self._limit)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self._collection, self._filters, (field, direction == "DESCENDING"), self._limit)

    def limit(self, n):
        return FakeQuery(self._collection, self._filters, self._order, n)

    def stream(self):
        rows = [
            (doc_id, data)
            for doc_id, data in self._collection.docs.items()
            if all(op(data.get(field), value) for field, op, value in self._filters)
        ]
        if self._order:
            field, descending = self._order
            rows = [r for r in rows if r[1].get(field) is not None]
            rows.sort(key=lambda r: r[1][field], reverse=descending)
        if self._limit is not None:
            rows = rows[: self._limit]
        return [FakeSnapshot(FakeDocument(self._collection, doc_id), data) for doc_id, data in rows]


class FakeCollection(FakeQuery):
    def __init__(self, db, name):
        self.docs: dict[str, dict] = {}
        self._db = db
        self.name = name
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocument(self, doc_id or self._db.next_id(self.name))

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return NOW, ref


class FakeBatch:
    def __init__(self):
        self._ops = []

    def update(self, ref, data):
        self._ops.append(lambda: ref.update(data))

    def delete(self, ref):
        self._ops.append(ref.delete)

    def commit(self):
        for op in self._ops:
            op()
        self._ops = []


class FakeFirestore:
    def __init__(self):
        self._collections: dict[str, FakeCollection] = {}
        self._ids = itertools.count(1)

    def next_id(self, prefix):
        return f"{prefix}-{next(self._ids)}"

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    def get_all(self, refs):
        return [ref.get() for ref in refs]

    def batch(self):
        return FakeBatch()


class FakeIdentity:
    def __init__(self):
        self.accounts: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self._ids = itertools.count(1)

    def verify_id_token(self, id_token):
        uid = self.tokens.get(id_token)
        if not uid:
            raise AuthenticationError("Invalid or expired sign-in token")
        return {"uid": uid, "email": self.accounts.get(uid, {}).get("email", "")}

    def create_account(self, *, email, password, display_name):
        uid = f"uid-{next(self._ids)}"
        self.accounts[uid] = {"email": email, "password": password, "display_name": display_name}
        return uid

    def delete_account(self, uid):
        self.accounts.pop(uid, None)


class FakeStorage:
    def __init__(self):
        self.files: dict[str, bytes] = {}

    def upload(self, path, stream, *, content_type):
        self.files[path] = stream.read()
        return f"https://storage.example.test/{path}"

    def delete(self, path):
        self.files.pop(path, None)


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def container(db, identity, storage):
    return build_container(
        users_repo=FirestoreUserRepository(db),
        identity=identity,
        classes_repo=FirestoreClassRepository(db),
        attendance_repo=FirestoreAttendanceRepository(db),
        checkins_repo=FirestoreCheckInRepository(db),
        homework_repo=FirestoreHomeworkRepository(db),
        submissions_repo=FirestoreSubmissionRepository(db),
        lessons_repo=FirestoreLessonRepository(db),
        materials_repo=FirestoreMaterialRepository(db),
        file_storage=storage,
        substitutions_repo=FirestoreSubstitutionRepository(db),
        notifications_repo=FirestoreNotificationRepository(db),
        payments_repo=FirestorePaymentRepository(db),
        fee_payments_repo=FirestoreFeePaymentRepository(db),
        receipts_repo=FirestoreReceiptRepository(db),
        action_logs_repo=FirestoreActionLogRepository(db),
        grace_minutes=10,
    )


@pytest.fixture
def make_user(container):
    def _make(user_id, role, *, name=None, class_id=None, assigned_class_id=None, status=AccountStatus.ACTIVE, **extra):
        user = User(
            user_id=user_id,
            email=f"{user_id}@school.test",
            display_name=name or user_id.title(),
            role=role,
            account_status=status,
            class_id=class_id,
            assigned_class_id=assigned_class_id,
            teacher_type=TeacherType.REGOLARE if role == Role.TEACHER else None,
            created_at=NOW,
            **extra,
        )
        container.users_repo.create_profile(user)
        return container.users_repo.get_by_id(user_id)

    return _make


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.school_portal.school_portal.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as s:
            s["user_id"] = user.user_id
            s["email"] = user.email
            s["name"] = user.display_name
            s["role"] = user.role.value
            s["class_id"] = user.class_id
            s["assigned_class_id"] = user.assigned_class_id

    return _login
