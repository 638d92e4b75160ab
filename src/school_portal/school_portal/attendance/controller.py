from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_user, login_required, parse_date, render_forbidden, roles_required
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import AttendanceEntry

logger = logging.getLogger(__name__)

STAFF = (Role.ADMIN, Role.OPERATORE, Role.TEACHER)


def register(app: Flask, container: Container) -> None:
    def _can_open_class(user, class_id: str) -> bool:
        classes = container.class_service.classes_for_user(user, today=date.today())
        return any(c.class_id == class_id for c in classes)

    @app.route("/attendance/class/<class_id>", methods=["GET", "POST"], endpoint="class_attendance")
    @roles_required(*STAFF)
    def class_attendance(class_id: str):
        try:
            user = current_user(container.users_repo)
            if not _can_open_class(user, class_id):
                return render_forbidden()
            day = parse_date(request.values.get("date")) or date.today()
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))

        if request.method == "POST":
            try:
                entries = [
                    AttendanceEntry(
                        student_id=sid,
                        status=request.form.get(f"status_{sid}", AttendanceStatus.PRESENT.value),
                        notes=request.form.get(f"notes_{sid}"),
                    )
                    for sid in request.form.getlist("student_ids")
                ]
                n = container.attendance_service.record_class_attendance(
                    current_user=user,
                    class_id=class_id,
                    day=day,
                    entries=entries,
                )
                flash(f"Attendance saved for {n} students", "success")
                return redirect(url_for("class_attendance", class_id=class_id, date=day.isoformat()))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Saving attendance failed for class %s", class_id)
                flash("System error while saving attendance", "danger")

        try:
            cls = container.class_service.get(class_id)
            roster = container.class_service.get_roster(class_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))

        records = {r.student_id: r for r in container.attendance_service.list_for_class(class_id, day)}
        return render_template(
            "attendance/class.html",
            cls=cls,
            roster=roster,
            records=records,
            day=day,
            statuses=list(AttendanceStatus),
            active_page="classes",
        )

    @app.route("/attendance/<attendance_id>/update", methods=["POST"], endpoint="update_attendance")
    @roles_required(*STAFF)
    def update_attendance(attendance_id: str):
        try:
            container.attendance_service.update_record(
                current_user=current_user(container.users_repo),
                attendance_id=attendance_id,
                status=request.form.get("status", ""),
                notes=request.form.get("notes", ""),
            )
            flash("Attendance updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Attendance update failed for %s", attendance_id)
            flash("System error while updating attendance", "danger")
        return redirect(request.referrer or url_for("classes"))

    @app.route("/attendance/<attendance_id>/delete", methods=["POST"], endpoint="delete_attendance")
    @roles_required(Role.ADMIN)
    def delete_attendance(attendance_id: str):
        try:
            container.attendance_service.delete_record(
                current_user=current_user(container.users_repo),
                attendance_id=attendance_id,
            )
            flash("Attendance record deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Attendance deletion failed for %s", attendance_id)
            flash("System error while deleting attendance", "danger")
        return redirect(request.referrer or url_for("classes"))

    @app.route("/attendance/my", endpoint="my_attendance")
    @roles_required(Role.STUDENT)
    def my_attendance():
        try:
            user = current_user(container.users_repo)
            records = container.attendance_service.list_for_student(current_user=user, student_id=user.user_id)
            summary = container.attendance_service.student_summary(user.user_id)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))
        return render_template(
            "attendance/student.html",
            student=user,
            records=records,
            summary=summary,
            active_page="attendance",
        )

    @app.route("/attendance/student/<student_id>", endpoint="student_attendance")
    @roles_required(*STAFF)
    def student_attendance(student_id: str):
        try:
            user = current_user(container.users_repo)
            student = container.user_service.get(student_id)
            records = container.attendance_service.list_for_student(current_user=user, student_id=student_id)
            summary = container.attendance_service.student_summary(student_id)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))
        return render_template(
            "attendance/student.html",
            student=student,
            records=records,
            summary=summary,
            active_page="classes",
        )
