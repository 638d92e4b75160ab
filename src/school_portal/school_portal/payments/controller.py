from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import month_of
from ..common.web import admin_required, current_actor, current_role, parse_date, roles_required
from ..container import Container
from ..core.enums import Role, TeacherPaymentType
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _payment_form() -> dict:
        return {
            "amount": request.form.get("amount"),
            "day": parse_date(request.form.get("date")),
            "payment_type": request.form.get("payment_type", TeacherPaymentType.SALARY.value),
            "month": request.form.get("month") or None,
            "description": request.form.get("description", ""),
            "notes": request.form.get("notes", ""),
        }

    @app.route("/admin/payments", endpoint="payments")
    @admin_required
    def payments():
        month = request.args.get("month") or month_of(date.today())
        teacher_id = request.args.get("teacher_id") or None
        try:
            items = container.payment_service.list_payments(month=month, teacher_id=teacher_id)
            summary = container.payment_service.monthly_summary(month)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("payments"))
        return render_template(
            "payments/list.html",
            items=items,
            summary=summary,
            month=month,
            teacher_id=teacher_id,
            teachers=container.user_service.list_teachers(),
            payment_types=list(TeacherPaymentType),
            active_page="payments",
        )

    @app.route("/admin/payments/add", methods=["POST"], endpoint="add_payment")
    @admin_required
    def add_payment():
        try:
            container.payment_service.log_payment(
                actor=current_actor(),
                current_role=current_role(),
                teacher_id=request.form.get("teacher_id", ""),
                **_payment_form(),
            )
            flash("Payment logged", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Logging a payment failed")
            flash("System error while logging the payment", "danger")
        return redirect(url_for("payments", month=request.form.get("month") or None))

    @app.route("/admin/payments/<payment_id>/edit", methods=["POST"], endpoint="edit_payment")
    @admin_required
    def edit_payment(payment_id: str):
        try:
            container.payment_service.update_payment(
                actor=current_actor(),
                current_role=current_role(),
                payment_id=payment_id,
                **_payment_form(),
            )
            flash("Payment updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Payment update failed for %s", payment_id)
            flash("System error while saving the payment", "danger")
        return redirect(url_for("payments", month=request.form.get("month") or None))

    @app.route("/admin/payments/<payment_id>/delete", methods=["POST"], endpoint="delete_payment")
    @roles_required(Role.ADMIN)
    def delete_payment(payment_id: str):
        try:
            container.payment_service.delete_payment(
                actor=current_actor(),
                current_role=current_role(),
                payment_id=payment_id,
            )
            flash("Payment deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Payment deletion failed for %s", payment_id)
            flash("System error while deleting the payment", "danger")
        return redirect(url_for("payments"))
