from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/checkin", methods=["POST"], endpoint="checkin")
    @roles_required(Role.TEACHER)
    def checkin():
        try:
            container.checkin_service.check_in(session["user_id"], location=request.form.get("location"))
            flash("Checked in", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("Check-in failed for %s", session.get("user_id"))
            flash("System error while checking in", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/checkout", methods=["POST"], endpoint="checkout")
    @roles_required(Role.TEACHER)
    def checkout():
        try:
            container.checkin_service.check_out(session["user_id"])
            flash("Checked out", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "warning")
        except Exception:
            logger.exception("Check-out failed for %s", session.get("user_id"))
            flash("System error while checking out", "danger")
        return redirect(url_for("dashboard"))

    @app.route("/checkins", endpoint="my_checkins")
    @roles_required(Role.TEACHER)
    def my_checkins():
        teacher_id = session["user_id"]
        return render_template(
            "checkins/history.html",
            today_record=container.checkin_service.today(teacher_id, date.today()),
            history=container.checkin_service.history(teacher_id),
            active_page="checkins",
        )
