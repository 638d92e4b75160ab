from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, flash, redirect, request, url_for

from config import get_settings_module

from .action_logs.controller import register as register_action_logs
from .attendance.controller import register as register_attendance
from .checkins.controller import register as register_checkins
from .classes.controller import register as register_classes
from .container import Container, build_firestore_container
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_SESSION_DAYS, MAX_UPLOAD_BYTES
from .database.bootstrap import ensure_admin_user
from .fees.controller import register as register_fees
from .homework.controller import register as register_homework
from .lessons.controller import register as register_lessons
from .materials.controller import register as register_materials
from .notifications.controller import register as register_notifications
from .parents.controller import register as register_parents
from .payments.controller import register as register_payments
from .stats.controller import register as register_stats
from .substitutions.controller import register as register_substitutions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    firebase_config = dict(getattr(settings, "FIREBASE_CONFIG"))
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    # Room for the multipart envelope around a maximum-size upload.
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES + 1024 * 1024
    app.config["FIREBASE_WEB"] = {
        "apiKey": firebase_config.get("web_api_key", ""),
        "authDomain": firebase_config.get("auth_domain", ""),
        "projectId": firebase_config.get("project_id") or "",
    }

    logger.info("settings=%s project=%s", settings_module, firebase_config.get("project_id") or "<default>")

    if container is None:
        container = build_firestore_container(
            firebase_config=firebase_config,
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
        )
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin_user(container.users_repo, container.user_service)

    @app.errorhandler(413)
    def too_large(_e):
        flash("The file exceeds the 10 MB limit", "danger")
        return redirect(request.referrer or url_for("materials"))

    register_users(app, container)
    register_classes(app, container)
    register_attendance(app, container)
    register_checkins(app, container)
    register_stats(app, container)
    register_homework(app, container)
    register_lessons(app, container)
    register_materials(app, container)
    register_substitutions(app, container)
    register_notifications(app, container)
    register_payments(app, container)
    register_fees(app, container)
    register_parents(app, container)
    register_action_logs(app, container)

    return app
