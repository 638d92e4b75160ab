from __future__ import annotations

import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, url_for

from ..common.web import current_user, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/parent", endpoint="parent_children")
    @roles_required(Role.PARENT)
    def parent_children():
        try:
            parent = current_user(container.users_repo)
            children = container.parent_service.children(parent)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("dashboard"))

        if len(children) == 1:
            return redirect(url_for("parent_child", child_id=children[0].user_id))
        return render_template("parents/children.html", children=children, active_page="parent")

    @app.route("/parent/children/<child_id>", endpoint="parent_child")
    @roles_required(Role.PARENT)
    def parent_child(child_id: str):
        try:
            parent = current_user(container.users_repo)
            overview = container.parent_service.child_overview(parent, child_id)
            children = container.parent_service.children(parent)
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
            return redirect(url_for("parent_children"))
        except Exception:
            logger.exception("Parent view failed for child %s", child_id)
            flash("Some data could not be loaded", "danger")
            return redirect(url_for("dashboard"))

        return render_template(
            "parents/child.html",
            overview=overview,
            children=children,
            today=date.today(),
            active_page="parent",
        )
