from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Optional

from flask import flash, redirect, render_template, request, session, url_for

from ..action_logs.model import Actor
from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.model import User
from ..users.repository import UserRepository


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            flash("Please sign in to continue", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return redirect(url_for("login"))
            if session.get("role") not in allowed:
                return render_forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(view):
    return roles_required(Role.ADMIN, Role.OPERATORE)(view)


def render_forbidden() -> tuple[str, int]:
    current_user = {"display_name": session.get("name"), "role": session.get("role")}
    return render_template("403.html", current_user=current_user), 403


def current_role() -> Role:
    return Role(session.get("role"))


def current_actor() -> Actor:
    return Actor(
        user_id=session["user_id"],
        email=session.get("email", ""),
        role=session.get("role", ""),
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )


def current_user(users: UserRepository) -> User:
    user = users.get_by_id(session["user_id"])
    if not user:
        raise ValidationError("Your profile could not be loaded, please sign in again")
    return user


def parse_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError("Dates must be YYYY-MM-DD")
