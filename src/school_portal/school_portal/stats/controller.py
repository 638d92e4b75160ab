from __future__ import annotations

import csv
import io
import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import month_of
from ..common.web import admin_required, current_actor
from ..container import Container
from ..core.enums import ActionType
from ..core.exceptions import ValidationError
from .service import CSV_HEADERS, SORT_KEYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _report_args() -> dict:
        return {
            "period": request.args.get("month") or month_of(date.today()),
            "search": request.args.get("q", ""),
            "sort_by": request.args.get("sort", "attendance_rate"),
            "descending": request.args.get("order", "desc") != "asc",
        }

    @app.route("/admin/teacher-stats", endpoint="teacher_stats")
    @admin_required
    def teacher_stats():
        args = _report_args()
        try:
            report = container.stats_service.build(**args)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("teacher_stats"))
        return render_template(
            "stats/teachers.html",
            report=report,
            sort_keys=list(SORT_KEYS),
            active_page="teacher_stats",
            **args,
        )

    @app.route("/admin/teacher-stats/export", endpoint="teacher_stats_export")
    @admin_required
    def teacher_stats_export():
        args = _report_args()
        try:
            report = container.stats_service.build(**args)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("teacher_stats"))

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for row in container.stats_service.csv_rows(report.rows):
            writer.writerow(row)

        container.action_logger.log_action(
            current_actor(),
            ActionType.DATA_EXPORT,
            target_type="teacher_stats",
            details={"period": report.period, "rows": len(report.rows)},
        )

        filename = f"teacher_attendance_{report.period}.csv"
        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
