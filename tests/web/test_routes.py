from __future__ import annotations

import csv
import io

from src.school_portal.school_portal.core.enums import AccountStatus, Role


def test_login_page_renders(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert b"id_token" in resp.data


def test_protected_pages_redirect_to_login(client):
    resp = client.get("/dashboard")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/")


def test_login_with_token_starts_session(client, identity, make_user, db):
    make_user("t1", Role.TEACHER, name="Anna")
    identity.tokens["good"] = "t1"

    resp = client.post("/", data={"id_token": "good"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/dashboard")
    with client.session_transaction() as s:
        assert s["role"] == "teacher"
        assert s["name"] == "Anna"
    actions = [d["action"] for d in db.collection("actionLogs").docs.values()]
    assert actions == ["login"]


def test_pending_account_login_is_refused(client, identity, make_user):
    make_user("t1", Role.TEACHER, status=AccountStatus.PENDING_APPROVAL)
    identity.tokens["good"] = "t1"

    resp = client.post("/", data={"id_token": "good"})

    assert resp.status_code == 200
    assert b"waiting for approval" in resp.data
    with client.session_transaction() as s:
        assert "user_id" not in s


def test_dashboard_for_teacher(client, login, make_user):
    login(make_user("t1", Role.TEACHER, name="Anna"))

    resp = client.get("/dashboard")

    assert resp.status_code == 200
    assert b"Welcome, Anna" in resp.data


def test_admin_pages_forbidden_for_students(client, login, make_user):
    login(make_user("s1", Role.STUDENT))

    assert client.get("/admin/teacher-stats").status_code == 403
    assert client.get("/admin/payments").status_code == 403
    assert client.get("/admin/action-logs").status_code == 403


def test_action_logs_are_admin_only(client, login, make_user):
    login(make_user("op", Role.OPERATORE))

    assert client.get("/admin/action-logs").status_code == 403


def test_unread_notifications_api(client, login, make_user, container):
    login(make_user("t1", Role.TEACHER))
    container.notification_service.notify(recipient_id="t1", type="info", title="Hi", message="")

    resp = client.get("/api/notifications/unread")

    assert resp.get_json() == {"success": True, "unread": 1}


def test_teacher_stats_csv_export(client, login, make_user, container, db):
    login(make_user("admin", Role.ADMIN))
    make_user("t1", Role.TEACHER, name="Anna")
    container.class_service.create_class(
        actor=None, current_role=Role.ADMIN, name="Sab", turno="sabato pomeriggio", teacher_id="t1"
    )

    resp = client.get("/admin/teacher-stats/export?month=2026-02")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "teacher_attendance_2026-02.csv" in resp.headers["Content-Disposition"]
    rows = list(csv.DictReader(io.StringIO(resp.data.decode("utf-8-sig"))))
    assert rows == [
        {
            "Teacher": "Anna",
            "Scheduled lessons": "4",
            "Attended lessons": "0",
            "Missed lessons": "4",
            "Late arrivals": "0",
            "Attendance rate": "0.0%",
            "Average late minutes": "0",
        }
    ]
    actions = [d["action"] for d in db.collection("actionLogs").docs.values()]
    assert actions == ["data_export"]


def test_teacher_stats_page(client, login, make_user):
    login(make_user("op", Role.OPERATORE))
    make_user("t1", Role.TEACHER, name="Anna")

    resp = client.get("/admin/teacher-stats?month=2026-02")

    assert resp.status_code == 200
    assert b"Anna" in resp.data


def test_checkin_post_without_class_flashes_warning(client, login, make_user):
    login(make_user("t1", Role.TEACHER))

    resp = client.post("/checkin", follow_redirects=True)

    assert resp.status_code == 200
    assert b"You have no assigned class" in resp.data


def test_logout_clears_session(client, login, make_user):
    login(make_user("t1", Role.TEACHER))

    client.get("/logout")

    with client.session_transaction() as s:
        assert "user_id" not in s


def test_family_fees_page_and_payment(client, login, make_user, container):
    login(make_user("op", Role.OPERATORE))
    make_user("s1", Role.STUDENT, name="Amina", parent_name="Maria Rossi", parent_contact="333111")

    resp = client.get("/admin/fees")
    assert resp.status_code == 200
    assert b"Maria Rossi" in resp.data

    resp = client.post(
        "/admin/fees/pay",
        data={"parent_contact": "333111", "amount": "50", "date": "2026-02-10", "notes": ""},
        follow_redirects=True,
    )
    assert resp.status_code == 200
    assert b"RIC-2026-0001" in resp.data
    assert container.fee_service.get_account("333111").paid_amount == 50.0


def test_family_fees_csv_export(client, login, make_user, db):
    login(make_user("admin", Role.ADMIN))
    make_user("s1", Role.STUDENT, name="Amina", parent_name="Maria Rossi", parent_contact="333111")

    resp = client.get("/admin/fees/export")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    rows = list(csv.DictReader(io.StringIO(resp.data.decode("utf-8-sig"))))
    assert [(r["Parent"], r["Total"], r["Status"]) for r in rows] == [("Maria Rossi", "120.00", "unpaid")]
    actions = [d["action"] for d in db.collection("actionLogs").docs.values()]
    assert actions == ["data_export"]


def test_fee_pages_forbidden_for_parents(client, login, make_user):
    login(make_user("p1", Role.PARENT))

    assert client.get("/admin/fees").status_code == 403
    assert client.get("/admin/receipts").status_code == 403


def test_parent_sees_own_child_only(client, login, make_user, container):
    parent = make_user("p1", Role.PARENT, name="Maria Rossi", phone_number="333111")
    make_user("p2", Role.PARENT)
    make_user("s1", Role.STUDENT, name="Amina")
    make_user("s2", Role.STUDENT, name="Sara")
    container.user_service.link_parent(actor=None, current_role=Role.ADMIN, student_id="s1", parent_id="p1")
    container.user_service.link_parent(actor=None, current_role=Role.ADMIN, student_id="s2", parent_id="p2")
    login(parent)

    resp = client.get("/parent")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/parent/children/s1")

    resp = client.get("/parent/children/s1")
    assert resp.status_code == 200
    assert b"Amina" in resp.data

    resp = client.get("/parent/children/s2", follow_redirects=True)
    assert b"not linked to your account" in resp.data
    assert b"Sara" not in resp.data


def test_parent_pages_forbidden_for_students(client, login, make_user):
    login(make_user("s1", Role.STUDENT))

    assert client.get("/parent").status_code == 403


def test_admin_links_parent_from_edit_page(client, login, make_user, container):
    login(make_user("admin", Role.ADMIN))
    make_user("p1", Role.PARENT, name="Maria Rossi", phone_number="333111")
    make_user("s1", Role.STUDENT)

    resp = client.get("/admin/users/s1/edit")
    assert resp.status_code == 200
    assert b"Maria Rossi (333111)" in resp.data

    client.post("/admin/users/s1/parent", data={"parent_id": "p1"})
    assert container.users_repo.get_by_id("s1").parent_id == "p1"

    client.post("/admin/users/s1/parent", data={"parent_id": ""})
    assert container.users_repo.get_by_id("s1").parent_id is None
