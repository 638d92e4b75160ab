from __future__ import annotations

from datetime import datetime

import pytest

from src.school_portal.school_portal.action_logs.model import Actor
from src.school_portal.school_portal.action_logs.service import ActionLogger, ActionLogService
from src.school_portal.school_portal.core.enums import ActionType, Role
from src.school_portal.school_portal.core.exceptions import AuthorizationError, ValidationError

ADMIN = Actor(user_id="admin", email="admin@school.test", role="admin", ip_address="10.0.0.1")
OPERATOR = Actor(user_id="op", email="op@school.test", role="operatore")


class BrokenLogs:
    def add(self, data):
        raise RuntimeError("firestore unavailable")

    def query(self, **kwargs):
        return []


def test_logger_swallows_write_failures():
    logger = ActionLogger(BrokenLogs())

    assert logger.log_action(ADMIN, ActionType.LOGIN) is None


def test_logger_skips_anonymous_actions(container, db):
    assert container.action_logger.log_action(None, ActionType.USER_CREATED) is None
    assert db.collection("actionLogs").docs == {}


def test_logger_writes_optional_fields_only_when_set(container):
    container.action_logger.log_action(
        ADMIN,
        ActionType.CLASS_CREATED,
        target_type="class",
        target_id="k1",
        target_name="Arabo 1",
        now=datetime(2026, 2, 7, 10, 0),
    )

    [log] = container.action_log_service.list_logs(current_role=Role.ADMIN)
    assert log.action == "class_created"
    assert log.ip_address == "10.0.0.1"
    assert log.user_agent is None
    assert log.target_name == "Arabo 1"


@pytest.fixture
def logs(container):
    write = container.action_logger.log_action
    write(ADMIN, ActionType.LOGIN, now=datetime(2026, 2, 6, 9, 0))
    write(OPERATOR, ActionType.LOGIN, now=datetime(2026, 2, 7, 9, 0))
    write(OPERATOR, ActionType.PAYMENT_CREATED, target_type="payment", now=datetime(2026, 2, 7, 9, 30))
    write(ADMIN, ActionType.DATA_EXPORT, target_type="teacher_stats", now=datetime(2026, 2, 8, 9, 0))
    return container.action_log_service


def test_list_filters(logs):
    assert [log.action for log in logs.list_logs(current_role=Role.ADMIN, user_id="op")] == [
        "payment_created",
        "login",
    ]
    assert len(logs.list_logs(current_role=Role.ADMIN, action="login")) == 2
    assert len(logs.list_logs(current_role=Role.ADMIN, target_type="payment")) == 1

    window = logs.list_logs(
        current_role=Role.ADMIN,
        start=datetime(2026, 2, 7, 0, 0),
        end=datetime(2026, 2, 7, 23, 59, 59),
    )
    assert [log.timestamp for log in window] == [datetime(2026, 2, 7, 9, 30), datetime(2026, 2, 7, 9, 0)]


def test_only_admin_reads_logs(logs):
    with pytest.raises(AuthorizationError):
        logs.list_logs(current_role=Role.OPERATORE)


def test_stats_grouping(logs):
    assert logs.stats(current_role=Role.ADMIN, group_by="action") == {
        "login": 2,
        "payment_created": 1,
        "data_export": 1,
    }
    assert logs.stats(current_role=Role.ADMIN, group_by="day") == {
        "2026-02-07": 2,
        "2026-02-06": 1,
        "2026-02-08": 1,
    }
    assert logs.stats(current_role=Role.ADMIN, group_by="user")["op@school.test (operatore)"] == 2

    with pytest.raises(ValidationError):
        logs.stats(current_role=Role.ADMIN, group_by="ip")


def test_service_accepts_any_repository():
    service = ActionLogService(BrokenLogs())

    assert service.stats(current_role=Role.ADMIN) == {}
