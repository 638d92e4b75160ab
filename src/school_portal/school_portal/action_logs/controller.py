from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_role, parse_date, roles_required
from ..container import Container
from ..core.enums import ActionType, Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/action-logs", endpoint="action_logs")
    @roles_required(Role.ADMIN)
    def action_logs():
        try:
            start_day = parse_date(request.args.get("start"))
            end_day = parse_date(request.args.get("end"))
            start = datetime.combine(start_day, time.min) if start_day else None
            # End date is inclusive.
            end = datetime.combine(end_day, time.min) + timedelta(days=1) if end_day else None
            group_by = request.args.get("group_by", "action")

            logs = container.action_log_service.list_logs(
                current_role=current_role(),
                user_id=request.args.get("user_id"),
                action=request.args.get("action"),
                target_type=request.args.get("target_type"),
                start=start,
                end=end,
            )
            stats = container.action_log_service.stats(
                current_role=current_role(),
                group_by=group_by,
                start=start,
                end=end,
            )
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))

        return render_template(
            "action_logs/list.html",
            logs=logs,
            stats=stats,
            group_by=group_by,
            groupings=container.action_log_service.GROUPINGS,
            actions=list(ActionType),
            filters=request.args,
            active_page="action_logs",
        )
