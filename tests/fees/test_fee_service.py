from __future__ import annotations

from datetime import date, datetime

import pytest

from src.school_portal.school_portal.action_logs.model import Actor
from src.school_portal.school_portal.core.enums import AccountStatus, FeeStatus, Role
from src.school_portal.school_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.school_portal.school_portal.fees.service import FeeService, fee_for

ADMIN = Actor(user_id="admin", email="admin@school.test", role="admin")
OPERATOR = Actor(user_id="op", email="op@school.test", role="operatore")

ROSSI = "333111"
BIANCHI = "333222"


@pytest.fixture
def families(make_user):
    make_user("s1", Role.STUDENT, name="Amina", parent_name="Maria Rossi", parent_contact=ROSSI)
    make_user("s2", Role.STUDENT, name="Omar", parent_name="Maria Rossi", parent_contact=ROSSI)
    make_user("s3", Role.STUDENT, name="Sara", parent_name="Luca Bianchi", parent_contact=BIANCHI)
    make_user("s4", Role.STUDENT, name="Youssef")
    make_user("s5", Role.STUDENT, parent_contact=ROSSI, status=AccountStatus.PENDING_APPROVAL)


def _pay(container, **overrides):
    args = dict(
        actor=OPERATOR,
        current_role=Role.OPERATORE,
        parent_contact=ROSSI,
        amount="100",
        notes=" first instalment ",
        day=date(2026, 2, 10),
        now=datetime(2026, 2, 10, 9, 30),
    )
    args.update(overrides)
    return container.fee_service.record_payment(**args)


def test_fee_depends_on_children_count():
    assert fee_for(0) == 0.0
    assert fee_for(1) == 120.0
    assert fee_for(2) == 220.0
    assert fee_for(4) == 360.0
    assert fee_for(7) == 360.0


def test_families_are_grouped_by_parent_contact(container, families):
    accounts = container.fee_service.family_accounts()

    assert [a.parent_name for a in accounts] == ["Luca Bianchi", "Maria Rossi"]
    rossi = container.fee_service.get_account(ROSSI)
    assert [c.display_name for c in rossi.children] == ["Amina", "Omar"]
    assert rossi.total_amount == 220.0
    assert rossi.status == FeeStatus.UNPAID

    with pytest.raises(NotFoundError):
        container.fee_service.get_account("000")


def test_record_payment_issues_numbered_receipts(container, families, db):
    payment_id, receipt_id = _pay(container)

    account = container.fee_service.get_account(ROSSI)
    assert account.paid_amount == 100.0
    assert account.remaining == 120.0
    assert account.status == FeeStatus.PARTIAL
    assert [p.payment_id for p in account.payments] == [payment_id]

    receipt = container.fee_service.get_receipt(receipt_id)
    assert receipt.receipt_number == "RIC-2026-0001"
    assert receipt.payment_id == payment_id
    assert receipt.parent_name == "Maria Rossi"
    assert receipt.date == date(2026, 2, 10)
    assert receipt.notes == "first instalment"

    _, second = _pay(container, amount="120", day=date(2026, 3, 1))
    assert container.fee_service.get_receipt(second).receipt_number == "RIC-2026-0002"
    assert container.fee_service.get_account(ROSSI).status == FeeStatus.PAID

    actions = [d["action"] for d in db.collection("actionLogs").docs.values()]
    assert actions.count("fee_payment_created") == 2


def test_payment_cannot_exceed_what_is_left(container, families):
    with pytest.raises(ValidationError, match="remaining"):
        _pay(container, amount="250")

    _pay(container, amount="220")
    with pytest.raises(ValidationError):
        _pay(container, amount="1")


def test_record_payment_validation(container, families):
    for bad in ("0", "-3", "abc", "nan", "inf"):
        with pytest.raises(ValidationError):
            _pay(container, amount=bad)
    with pytest.raises(NotFoundError):
        _pay(container, parent_contact="000")
    with pytest.raises(AuthorizationError):
        _pay(container, current_role=Role.TEACHER)


def test_receipt_failure_keeps_the_payment(container, families, monkeypatch):
    def boom(data):
        raise RuntimeError("firestore down")

    monkeypatch.setattr(container.fee_service._receipts, "create", boom)

    payment_id, receipt_id = _pay(container)

    assert receipt_id is None
    assert container.fee_service.get_account(ROSSI).paid_amount == 100.0
    assert payment_id


def test_update_payment_keeps_total_within_fee(container, families):
    first, receipt_id = _pay(container)
    _pay(container, amount="120")

    with pytest.raises(ValidationError):
        container.fee_service.update_payment(
            actor=OPERATOR, current_role=Role.OPERATORE, payment_id=first, amount="150"
        )

    container.fee_service.update_payment(actor=OPERATOR, current_role=Role.OPERATORE, payment_id=first, amount="80")

    assert container.fee_service.get_account(ROSSI).paid_amount == 200.0
    assert container.fee_service.get_receipt(receipt_id).amount == 80.0

    with pytest.raises(NotFoundError):
        container.fee_service.update_payment(actor=OPERATOR, current_role=Role.OPERATORE, payment_id="x", amount="10")


def test_delete_payment_is_admin_only_and_removes_receipt(container, families):
    payment_id, receipt_id = _pay(container)

    with pytest.raises(AuthorizationError):
        container.fee_service.delete_payment(actor=OPERATOR, current_role=Role.OPERATORE, payment_id=payment_id)

    container.fee_service.delete_payment(actor=ADMIN, current_role=Role.ADMIN, payment_id=payment_id)

    assert container.fee_service.get_account(ROSSI).paid_amount == 0.0
    with pytest.raises(NotFoundError):
        container.fee_service.get_receipt(receipt_id)


def test_exemption_applies_to_the_whole_family(container, families):
    container.fee_service.set_exemption(
        actor=OPERATOR, current_role=Role.OPERATORE, parent_contact=ROSSI, exempted=True
    )

    account = container.fee_service.get_account(ROSSI)
    assert account.status == FeeStatus.EXEMPTED
    assert account.total_amount == 0.0
    assert account.remaining == 0.0
    assert all(container.users_repo.get_by_id(sid).payment_exempted for sid in ("s1", "s2"))

    # Exempted families may still give something.
    _pay(container, amount="50")
    assert container.fee_service.get_account(ROSSI).paid_amount == 50.0

    container.fee_service.set_exemption(
        actor=OPERATOR, current_role=Role.OPERATORE, parent_contact=ROSSI, exempted=False
    )
    assert container.fee_service.get_account(ROSSI).status == FeeStatus.PARTIAL

    with pytest.raises(AuthorizationError):
        container.fee_service.set_exemption(
            actor=None, current_role=Role.TEACHER, parent_contact=ROSSI, exempted=True
        )


def test_filter_and_sort(container, families):
    _pay(container, amount="220")
    accounts = container.fee_service.family_accounts()

    found = FeeService.filter_and_sort(accounts, search="sara")
    assert [a.parent_contact for a in found] == [BIANCHI]
    assert [a.parent_contact for a in FeeService.filter_and_sort(accounts, status="paid")] == [ROSSI]
    by_total = FeeService.filter_and_sort(accounts, sort_by="total_amount", descending=True)
    assert [a.parent_contact for a in by_total] == [ROSSI, BIANCHI]

    with pytest.raises(ValidationError):
        FeeService.filter_and_sort(accounts, status="late")
    with pytest.raises(ValidationError):
        FeeService.filter_and_sort(accounts, sort_by="children")

    assert FeeService.totals(accounts) == {"families": 2, "due": 340.0, "paid": 220.0, "remaining": 120.0}


def test_csv_rows(container, families):
    _pay(container)

    rows = FeeService.csv_rows([container.fee_service.get_account(ROSSI)])

    assert rows == [
        {
            "Parent": "Maria Rossi",
            "Phone": ROSSI,
            "Children": 2,
            "Total": "220.00",
            "Paid": "100.00",
            "Remaining": "120.00",
            "Status": "partial",
        }
    ]


def test_list_receipts_search_and_date(container, families):
    _pay(container)
    _pay(container, parent_contact=BIANCHI, amount="120", day=date(2026, 2, 11))

    assert [r.parent_name for r in container.fee_service.list_receipts(search="bianchi")] == ["Luca Bianchi"]
    assert [r.receipt_number for r in container.fee_service.list_receipts(search="ric-2026-0001")] == ["RIC-2026-0001"]
    assert [r.parent_name for r in container.fee_service.list_receipts(day=date(2026, 2, 10))] == ["Maria Rossi"]
    assert len(container.fee_service.list_receipts()) == 2
