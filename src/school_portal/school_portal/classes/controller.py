from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import admin_required, current_actor, current_role, current_user, login_required, render_forbidden
from ..container import Container
from ..core.enums import Turno
from ..core.exceptions import AuthorizationError, ValidationError
from ..core.permissions import has_admin_access

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/classes", endpoint="classes")
    @login_required
    def classes():
        try:
            user = current_user(container.users_repo)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        ctx: dict = {"classes": container.class_service.classes_for_user(user, today=date.today())}
        if has_admin_access(user.role):
            ctx["teachers"] = container.user_service.list_teachers()
            ctx["turni"] = list(Turno)
        return render_template("classes/list.html", active_page="classes", **ctx)

    @app.route("/classes/<class_id>", endpoint="class_detail")
    @login_required
    def class_detail(class_id: str):
        try:
            user = current_user(container.users_repo)
            visible = {c.class_id for c in container.class_service.classes_for_user(user, today=date.today())}
            if class_id not in visible:
                return render_forbidden()

            cls = container.class_service.get(class_id)
            roster = container.class_service.get_roster(class_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))

        ctx: dict = {"cls": cls, "roster": roster}
        if has_admin_access(user.role):
            ctx["students"] = container.user_service.list_students()
            ctx["teachers"] = container.user_service.list_teachers()
            ctx["turni"] = list(Turno)
        return render_template("classes/detail.html", active_page="classes", **ctx)

    @app.route("/classes/add", methods=["POST"], endpoint="add_class")
    @admin_required
    def add_class():
        try:
            container.class_service.create_class(
                actor=current_actor(),
                current_role=current_role(),
                name=request.form.get("name", ""),
                description=request.form.get("description", ""),
                turno=request.form.get("turno") or None,
                teacher_id=request.form.get("teacher_id") or None,
            )
            flash("Class created", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Class creation failed")
            flash("System error while creating the class", "danger")
        return redirect(url_for("classes"))

    @app.route("/classes/<class_id>/edit", methods=["POST"], endpoint="edit_class")
    @admin_required
    def edit_class(class_id: str):
        try:
            container.class_service.update_class(
                actor=current_actor(),
                current_role=current_role(),
                class_id=class_id,
                name=request.form.get("name", ""),
                description=request.form.get("description", ""),
                turno=request.form.get("turno") or None,
            )
            flash("Class updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Class update failed for %s", class_id)
            flash("System error while saving the class", "danger")
        return redirect(url_for("class_detail", class_id=class_id))

    @app.route("/classes/<class_id>/delete", methods=["POST"], endpoint="delete_class")
    @admin_required
    def delete_class(class_id: str):
        try:
            container.class_service.delete_class(actor=current_actor(), current_role=current_role(), class_id=class_id)
            flash("Class deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Class deletion failed for %s", class_id)
            flash("System error while deleting the class", "danger")
        return redirect(url_for("classes"))

    @app.route("/classes/<class_id>/teacher", methods=["POST"], endpoint="assign_teacher")
    @admin_required
    def assign_teacher(class_id: str):
        try:
            container.class_service.assign_teacher(
                actor=current_actor(),
                current_role=current_role(),
                class_id=class_id,
                teacher_id=request.form.get("teacher_id") or None,
            )
            flash("Teacher assignment saved", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Teacher assignment failed for %s", class_id)
            flash("System error while assigning the teacher", "danger")
        return redirect(url_for("class_detail", class_id=class_id))

    @app.route("/classes/<class_id>/students", methods=["POST"], endpoint="set_students")
    @admin_required
    def set_students(class_id: str):
        try:
            container.class_service.set_students(
                actor=current_actor(),
                current_role=current_role(),
                class_id=class_id,
                student_ids=request.form.getlist("student_ids"),
            )
            flash("Roster saved", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Roster update failed for %s", class_id)
            flash("System error while saving the roster", "danger")
        return redirect(url_for("class_detail", class_id=class_id))

    @app.route("/classes/<class_id>/students/add", methods=["POST"], endpoint="add_student")
    @admin_required
    def add_student(class_id: str):
        try:
            container.class_service.add_student(
                actor=current_actor(),
                current_role=current_role(),
                class_id=class_id,
                student_id=request.form.get("student_id", ""),
            )
            flash("Student added", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Adding a student failed for %s", class_id)
            flash("System error while adding the student", "danger")
        return redirect(url_for("class_detail", class_id=class_id))

    @app.route("/classes/<class_id>/students/<student_id>/remove", methods=["POST"], endpoint="remove_student")
    @admin_required
    def remove_student(class_id: str, student_id: str):
        try:
            container.class_service.remove_student(
                actor=current_actor(),
                current_role=current_role(),
                class_id=class_id,
                student_id=student_id,
            )
            flash("Student removed", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Removing a student failed for %s", class_id)
            flash("System error while removing the student", "danger")
        return redirect(url_for("class_detail", class_id=class_id))
