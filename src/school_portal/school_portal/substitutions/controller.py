from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import admin_required, current_role, current_user, parse_date, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..core.permissions import has_admin_access

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/substitutions", endpoint="substitutions")
    @roles_required(Role.ADMIN, Role.OPERATORE, Role.TEACHER)
    def substitutions():
        role = current_role()
        today = date.today()

        if has_admin_access(role):
            teachers = container.user_service.list_teachers()
            return render_template(
                "substitutions/admin.html",
                pending=container.substitution_service.list_pending(),
                history=container.substitution_service.history(today=today),
                teachers=teachers,
                substitutes=[t for t in teachers if t.available_for_substitution],
                classes=container.class_service.list_classes(),
                active_page="substitutions",
            )

        teacher_id = session["user_id"]
        return render_template(
            "substitutions/teacher.html",
            items=container.substitution_service.list_for_teacher(teacher_id),
            classes=[c for c in container.class_service.classes_for_teacher(teacher_id, today=today) if not c.is_temporary],
            active_page="substitutions",
        )

    @app.route("/substitutions/request", methods=["POST"], endpoint="request_substitution")
    @roles_required(Role.TEACHER)
    def request_substitution():
        try:
            container.substitution_service.request(
                current_user=current_user(container.users_repo),
                class_id=request.form.get("class_id", ""),
                day=parse_date(request.form.get("date")),
                start_time=request.form.get("start_time", ""),
                end_time=request.form.get("end_time", ""),
                reason=request.form.get("reason", ""),
            )
            flash("Request sent", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Substitution request failed")
            flash("System error while sending the request", "danger")
        return redirect(url_for("substitutions"))

    @app.route("/substitutions/assign", methods=["POST"], endpoint="assign_substitution")
    @admin_required
    def assign_substitution():
        try:
            container.substitution_service.assign(
                current_role=current_role(),
                original_teacher_id=request.form.get("original_teacher_id", ""),
                substitute_teacher_id=request.form.get("substitute_teacher_id", ""),
                class_id=request.form.get("class_id", ""),
                day=parse_date(request.form.get("date")),
                start_time=request.form.get("start_time", ""),
                end_time=request.form.get("end_time", ""),
                reason=request.form.get("reason", ""),
            )
            flash("Substitute assigned", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Substitution assignment failed")
            flash("System error while assigning the substitute", "danger")
        return redirect(url_for("substitutions"))

    @app.route("/substitutions/<substitution_id>/approve", methods=["POST"], endpoint="approve_substitution")
    @admin_required
    def approve_substitution(substitution_id: str):
        try:
            container.substitution_service.approve(
                current_role=current_role(),
                admin_user_id=session["user_id"],
                substitution_id=substitution_id,
                notes=request.form.get("notes", ""),
            )
            flash("Request approved", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Approving substitution %s failed", substitution_id)
            flash("System error while approving the request", "danger")
        return redirect(url_for("substitutions"))

    @app.route("/substitutions/<substitution_id>/reject", methods=["POST"], endpoint="reject_substitution")
    @admin_required
    def reject_substitution(substitution_id: str):
        try:
            container.substitution_service.reject(
                current_role=current_role(),
                admin_user_id=session["user_id"],
                substitution_id=substitution_id,
                notes=request.form.get("notes", ""),
            )
            flash("Request rejected", "info")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Rejecting substitution %s failed", substitution_id)
            flash("System error while rejecting the request", "danger")
        return redirect(url_for("substitutions"))

    @app.route("/substitutions/<substitution_id>/complete", methods=["POST"], endpoint="complete_substitution")
    @roles_required(Role.ADMIN, Role.OPERATORE, Role.TEACHER)
    def complete_substitution(substitution_id: str):
        try:
            container.substitution_service.complete(
                current_user=current_user(container.users_repo),
                substitution_id=substitution_id,
            )
            flash("Substitution marked as completed", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Completing substitution %s failed", substitution_id)
            flash("System error while completing the substitution", "danger")
        return redirect(url_for("substitutions"))
