from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, render_template, session, url_for

from ..common.web import login_required
from ..container import Container
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/notifications", endpoint="notifications")
    @login_required
    def notifications():
        return render_template(
            "notifications/list.html",
            items=container.notification_service.list_for(session["user_id"]),
            active_page="notifications",
        )

    @app.route("/api/notifications/unread", endpoint="api_unread_notifications")
    @login_required
    def api_unread_notifications():
        try:
            count = container.notification_service.unread_count(session["user_id"])
        except Exception:
            logger.exception("Counting notifications failed for %s", session.get("user_id"))
            return jsonify({"success": False, "message": "System error"}), 500
        return jsonify({"success": True, "unread": count})

    @app.route("/notifications/<notification_id>/read", methods=["POST"], endpoint="read_notification")
    @login_required
    def read_notification(notification_id: str):
        try:
            container.notification_service.mark_read(recipient_id=session["user_id"], notification_id=notification_id)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Marking notification %s failed", notification_id)
            flash("System error while updating the notification", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/read-all", methods=["POST"], endpoint="read_all_notifications")
    @login_required
    def read_all_notifications():
        try:
            n = container.notification_service.mark_all_read(session["user_id"])
            flash(f"{n} notifications marked as read", "success")
        except Exception:
            logger.exception("Marking notifications failed for %s", session.get("user_id"))
            flash("System error while updating notifications", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/<notification_id>/delete", methods=["POST"], endpoint="delete_notification")
    @login_required
    def delete_notification(notification_id: str):
        try:
            container.notification_service.delete(recipient_id=session["user_id"], notification_id=notification_id)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Deleting notification %s failed", notification_id)
            flash("System error while deleting the notification", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/clear", methods=["POST"], endpoint="clear_notifications")
    @login_required
    def clear_notifications():
        try:
            container.notification_service.clear_all(session["user_id"])
            flash("Notifications cleared", "info")
        except Exception:
            logger.exception("Clearing notifications failed for %s", session.get("user_id"))
            flash("System error while clearing notifications", "danger")
        return redirect(url_for("notifications"))
