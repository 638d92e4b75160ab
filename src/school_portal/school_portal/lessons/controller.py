from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_user, login_required, parse_date, render_forbidden, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)

STAFF = (Role.ADMIN, Role.OPERATORE, Role.TEACHER)


def register(app: Flask, container: Container) -> None:
    def _visible(user) -> set[str]:
        return {c.class_id for c in container.class_service.classes_for_user(user, today=date.today())}

    @app.route("/classes/<class_id>/lessons", endpoint="lessons")
    @login_required
    def lessons(class_id: str):
        try:
            user = current_user(container.users_repo)
            if class_id not in _visible(user):
                return render_forbidden()
            cls = container.class_service.get(class_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))
        return render_template(
            "lessons/list.html",
            cls=cls,
            lessons=container.lesson_service.list_for_class(class_id),
            active_page="classes",
        )

    @app.route("/classes/<class_id>/lessons/add", methods=["POST"], endpoint="add_lesson")
    @roles_required(*STAFF)
    def add_lesson(class_id: str):
        try:
            lesson_id = container.lesson_service.create_lesson(
                current_user=current_user(container.users_repo),
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                class_id=class_id,
                day=parse_date(request.form.get("date")),
                topics=request.form.get("topics", ""),
            )
            flash("Lesson created", "success")
            return redirect(url_for("lesson_detail", lesson_id=lesson_id))
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Lesson creation failed for class %s", class_id)
            flash("System error while creating the lesson", "danger")
        return redirect(url_for("lessons", class_id=class_id))

    @app.route("/lessons/<lesson_id>", endpoint="lesson_detail")
    @login_required
    def lesson_detail(lesson_id: str):
        try:
            user = current_user(container.users_repo)
            details = container.lesson_service.lesson_details(lesson_id)
            if details.lesson.class_id not in _visible(user):
                return render_forbidden()
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("classes"))

        ctx: dict = {"details": details}
        if user.role in STAFF:
            class_id = details.lesson.class_id
            ctx["class_materials"] = container.material_service.list_for_class(class_id)
            ctx["class_homework"] = container.homework_service.list_for_class(class_id)
        return render_template("lessons/detail.html", active_page="classes", **ctx)

    @app.route("/lessons/<lesson_id>/edit", methods=["POST"], endpoint="edit_lesson")
    @roles_required(*STAFF)
    def edit_lesson(lesson_id: str):
        try:
            container.lesson_service.update_lesson(
                current_user=current_user(container.users_repo),
                lesson_id=lesson_id,
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                day=parse_date(request.form.get("date")),
                topics=request.form.get("topics", ""),
            )
            flash("Lesson updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Lesson update failed for %s", lesson_id)
            flash("System error while saving the lesson", "danger")
        return redirect(url_for("lesson_detail", lesson_id=lesson_id))

    @app.route("/lessons/<lesson_id>/delete", methods=["POST"], endpoint="delete_lesson")
    @roles_required(*STAFF)
    def delete_lesson(lesson_id: str):
        try:
            user = current_user(container.users_repo)
            class_id = container.lesson_service.lesson_details(lesson_id).lesson.class_id
            container.lesson_service.delete_lesson(current_user=user, lesson_id=lesson_id)
            flash("Lesson deleted", "success")
            return redirect(url_for("lessons", class_id=class_id))
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Lesson deletion failed for %s", lesson_id)
            flash("System error while deleting the lesson", "danger")
        return redirect(url_for("classes"))

    @app.route("/lessons/<lesson_id>/materials", methods=["POST"], endpoint="attach_material")
    @roles_required(*STAFF)
    def attach_material(lesson_id: str):
        try:
            container.lesson_service.attach_material(
                current_user=current_user(container.users_repo),
                lesson_id=lesson_id,
                material_id=request.form.get("material_id", ""),
            )
            flash("Material linked", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Linking a material failed for lesson %s", lesson_id)
            flash("System error while linking the material", "danger")
        return redirect(url_for("lesson_detail", lesson_id=lesson_id))

    @app.route("/lessons/<lesson_id>/homework", methods=["POST"], endpoint="attach_homework")
    @roles_required(*STAFF)
    def attach_homework(lesson_id: str):
        try:
            container.lesson_service.attach_homework(
                current_user=current_user(container.users_repo),
                lesson_id=lesson_id,
                homework_id=request.form.get("homework_id", ""),
            )
            flash("Homework linked", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Linking homework failed for lesson %s", lesson_id)
            flash("System error while linking the homework", "danger")
        return redirect(url_for("lesson_detail", lesson_id=lesson_id))
