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


def _lines(value: str) -> list[str]:
    return [line.strip() for line in (value or "").splitlines() if line.strip()]


def register(app: Flask, container: Container) -> None:
    @app.route("/homework", endpoint="homework")
    @login_required
    def homework():
        try:
            user = current_user(container.users_repo)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        if user.role == Role.STUDENT:
            return render_template(
                "homework/list.html",
                items=container.homework_service.list_for_student(user),
                submissions=container.homework_service.submissions_by_student(user.user_id),
                active_page="homework",
            )

        classes = container.class_service.classes_for_user(user, today=date.today())
        return render_template(
            "homework/list.html",
            items=container.homework_service.list_for_classes([c.class_id for c in classes]),
            classes=classes,
            submissions={},
            active_page="homework",
        )

    @app.route("/homework/add", methods=["POST"], endpoint="add_homework")
    @roles_required(*STAFF)
    def add_homework():
        try:
            container.homework_service.create_homework(
                current_user=current_user(container.users_repo),
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                class_id=request.form.get("class_id", ""),
                due_date=parse_date(request.form.get("due_date")),
                lesson_id=request.form.get("lesson_id") or None,
                attachment_urls=_lines(request.form.get("attachment_urls", "")),
            )
            flash("Homework assigned", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Homework creation failed")
            flash("System error while assigning homework", "danger")
        return redirect(url_for("homework"))

    @app.route("/homework/<homework_id>", endpoint="homework_detail")
    @login_required
    def homework_detail(homework_id: str):
        try:
            user = current_user(container.users_repo)
            hw = container.homework_service.get(homework_id)
            visible = {c.class_id for c in container.class_service.classes_for_user(user, today=date.today())}
            if hw.class_id not in visible:
                return render_forbidden()
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("homework"))

        if user.role == Role.STUDENT:
            own = container.homework_service.submissions_by_student(user.user_id).get(homework_id)
            return render_template("homework/detail.html", hw=hw, own_submission=own, active_page="homework")

        return render_template(
            "homework/detail.html",
            hw=hw,
            submissions=container.homework_service.list_submissions(homework_id),
            active_page="homework",
        )

    @app.route("/homework/<homework_id>/delete", methods=["POST"], endpoint="delete_homework")
    @roles_required(*STAFF)
    def delete_homework(homework_id: str):
        try:
            container.homework_service.delete_homework(
                current_user=current_user(container.users_repo),
                homework_id=homework_id,
            )
            flash("Homework deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Homework deletion failed for %s", homework_id)
            flash("System error while deleting homework", "danger")
        return redirect(url_for("homework"))

    @app.route("/homework/<homework_id>/submit", methods=["POST"], endpoint="submit_homework")
    @roles_required(Role.STUDENT)
    def submit_homework(homework_id: str):
        try:
            container.homework_service.submit(
                student=current_user(container.users_repo),
                homework_id=homework_id,
                text=request.form.get("text", ""),
                urls=_lines(request.form.get("urls", "")),
            )
            flash("Homework submitted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Submission failed for homework %s", homework_id)
            flash("System error while submitting homework", "danger")
        return redirect(url_for("homework_detail", homework_id=homework_id))

    @app.route("/submissions/<submission_id>/grade", methods=["POST"], endpoint="grade_submission")
    @roles_required(*STAFF)
    def grade_submission(submission_id: str):
        try:
            container.homework_service.grade(
                current_user=current_user(container.users_repo),
                submission_id=submission_id,
                grade=request.form.get("grade"),
                feedback=request.form.get("feedback", ""),
            )
            flash("Grade saved", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Grading failed for submission %s", submission_id)
            flash("System error while saving the grade", "danger")
        return redirect(request.referrer or url_for("homework"))
