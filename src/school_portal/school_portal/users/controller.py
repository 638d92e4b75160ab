from __future__ import annotations

import logging
from datetime import date, timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import admin_required, current_actor, current_role, current_user, login_required, roles_required
from ..container import Container
from ..core.enums import ActionType, Role, TeacherType
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..core.permissions import get_permission, has_admin_access

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.context_processor
    def inject_permissions():
        role = session.get("role")
        if not role:
            return {"can": lambda resource, action="view": False, "is_admin_like": False}

        def can(resource: str, action: str = "view") -> bool:
            return getattr(get_permission(Role(role), resource), f"can_{action}")

        return {"can": can, "is_admin_like": has_admin_access(Role(role))}

    def _parse_role(value: str) -> Role:
        try:
            return Role(value)
        except ValueError:
            raise ValidationError("Invalid account type")

    def _parse_teacher_type(value: str):
        if not value:
            return None
        try:
            return TeacherType(value)
        except ValueError:
            raise ValidationError("Invalid teacher type")

    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            id_token = request.form.get("id_token", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(id_token)

                session.clear()
                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=int(app.config.get("SESSION_DAYS", 7)))

                session["user_id"] = s_user.user_id
                session["email"] = s_user.email
                session["name"] = s_user.display_name
                session["role"] = s_user.role.value
                session["class_id"] = s_user.class_id
                session["assigned_class_id"] = s_user.assigned_class_id

                container.action_logger.log_action(current_actor(), ActionType.LOGIN)
                flash("Signed in", "success")
                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception as e:
                logger.exception("Login failed")
                if bool(app.config.get("DEBUG", False)):
                    flash(f"System error while signing in: {e}", "danger")
                else:
                    flash("System error while signing in", "danger")

        return render_template("login.html", firebase=app.config.get("FIREBASE_WEB", {}))

    @app.route("/register", methods=["GET", "POST"], endpoint="register")
    def register_account():
        if request.method == "POST":
            try:
                container.user_service.register(
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                    display_name=request.form.get("display_name", ""),
                    role=_parse_role(request.form.get("role", Role.STUDENT.value)),
                    phone_number=request.form.get("phone_number"),
                )
                flash("Account created. An administrator must approve it before you can sign in.", "info")
                return redirect(url_for("login"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Registration failed")
                flash("System error while registering", "danger")

        return render_template("register.html")

    @app.route("/logout", endpoint="logout")
    def logout():
        if "user_id" in session:
            container.action_logger.log_action(current_actor(), ActionType.LOGOUT)
        session.clear()
        flash("Signed out", "info")
        return redirect(url_for("login"))

    @app.route("/dashboard", endpoint="dashboard")
    @login_required
    def dashboard():
        today = date.today()
        role = current_role()
        ctx: dict = {"name": session.get("name"), "role": role.value, "today": today}

        try:
            user = current_user(container.users_repo)
            ctx["classes"] = container.class_service.classes_for_user(user, today=today)
            ctx["unread"] = container.notification_service.unread_count(user.user_id)

            if has_admin_access(role):
                ctx["pending_users"] = container.user_service.list_pending()
                ctx["pending_substitutions"] = container.substitution_service.list_pending()
            elif role == Role.TEACHER:
                ctx["checkin"] = container.checkin_service.today(user.user_id, today)
            elif role == Role.STUDENT:
                ctx["homework"] = container.homework_service.list_for_student(user)
                ctx["summary"] = container.attendance_service.student_summary(user.user_id)
            elif role == Role.PARENT:
                ctx["children"] = container.parent_service.children(user)
                ctx["pending_homework"] = container.parent_service.pending_homework(user)
        except ValidationError as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Dashboard failed to load")
            flash("Some data could not be loaded", "danger")

        return render_template("dashboard.html", active_page="dashboard", **ctx)

    @app.route("/profile", methods=["GET", "POST"], endpoint="profile")
    @login_required
    def profile():
        try:
            user = current_user(container.users_repo)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        if request.method == "POST":
            try:
                container.user_service.update_profile(
                    actor=current_actor(),
                    current_role=current_role(),
                    user_id=user.user_id,
                    display_name=request.form.get("display_name", ""),
                    phone_number=request.form.get("phone_number"),
                    available_for_substitution=bool(request.form.get("available_for_substitution"))
                    if user.role == Role.TEACHER
                    else None,
                )
                session["name"] = request.form.get("display_name", "").strip()
                flash("Profile updated", "success")
                return redirect(url_for("profile"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Profile update failed")
                flash("System error while saving the profile", "danger")

        return render_template("profile.html", user=user, active_page="profile")

    @app.route("/admin/users", endpoint="admin_users")
    @admin_required
    def admin_users():
        role_s = request.args.get("role") or None
        role = Role(role_s) if role_s in {r.value for r in Role} else None
        return render_template(
            "admin/users.html",
            users=container.user_service.list_users(role=role),
            pending=container.user_service.list_pending(),
            roles=list(Role),
            teacher_types=list(TeacherType),
            selected_role=role_s,
            active_page="admin_users",
        )

    @app.route("/admin/users/add", methods=["POST"], endpoint="add_user")
    @admin_required
    def add_user():
        try:
            container.user_service.create_account(
                actor=current_actor(),
                current_role=current_role(),
                email=request.form.get("email", ""),
                password=request.form.get("password", ""),
                display_name=request.form.get("display_name", ""),
                role=_parse_role(request.form.get("role", "")),
                teacher_type=_parse_teacher_type(request.form.get("teacher_type", "")),
                phone_number=request.form.get("phone_number"),
            )
            flash("User created", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("User creation failed")
            flash("System error while creating the user", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<user_id>/approve", methods=["POST"], endpoint="approve_user")
    @admin_required
    def approve_user(user_id: str):
        try:
            container.user_service.approve(actor=current_actor(), current_role=current_role(), user_id=user_id)
            flash("Account approved", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Approval failed for %s", user_id)
            flash("System error while approving the account", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<user_id>/role", methods=["POST"], endpoint="change_role")
    @roles_required(Role.ADMIN)
    def change_role(user_id: str):
        try:
            container.user_service.change_role(
                actor=current_actor(),
                current_role=current_role(),
                user_id=user_id,
                new_role=_parse_role(request.form.get("role", "")),
            )
            flash("Role updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Role change failed for %s", user_id)
            flash("System error while changing the role", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<user_id>/edit", methods=["GET", "POST"], endpoint="edit_user")
    @admin_required
    def edit_user(user_id: str):
        if request.method == "POST":
            try:
                container.user_service.update_profile(
                    actor=current_actor(),
                    current_role=current_role(),
                    user_id=user_id,
                    display_name=request.form.get("display_name", ""),
                    phone_number=request.form.get("phone_number"),
                    teacher_type=_parse_teacher_type(request.form.get("teacher_type", "")),
                    available_for_substitution=bool(request.form.get("available_for_substitution")),
                    parent_name=request.form.get("parent_name"),
                    parent_contact=request.form.get("parent_contact"),
                )
                flash("User updated", "success")
                return redirect(url_for("admin_users"))
            except (ValidationError, AuthorizationError) as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("User update failed for %s", user_id)
                flash("System error while saving the user", "danger")

        try:
            user = container.user_service.get(user_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("admin_users"))
        return render_template(
            "admin/edit_user.html",
            user=user,
            teacher_types=list(TeacherType),
            parents=container.user_service.list_parents() if user.role == Role.STUDENT else [],
            active_page="admin_users",
        )

    @app.route("/admin/users/<user_id>/delete", methods=["POST"], endpoint="delete_user")
    @roles_required(Role.ADMIN)
    def delete_user(user_id: str):
        try:
            container.user_service.delete_user(actor=current_actor(), current_role=current_role(), user_id=user_id)
            flash("User deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("User deletion failed for %s", user_id)
            flash("System error while deleting the user", "danger")
        return redirect(url_for("admin_users"))

    @app.route("/admin/users/<user_id>/parent", methods=["POST"], endpoint="link_parent")
    @admin_required
    def link_parent(user_id: str):
        parent_id = request.form.get("parent_id", "").strip()
        try:
            if parent_id:
                container.user_service.link_parent(
                    actor=current_actor(),
                    current_role=current_role(),
                    student_id=user_id,
                    parent_id=parent_id,
                )
                flash("Parent linked", "success")
            else:
                container.user_service.unlink_parent(
                    actor=current_actor(),
                    current_role=current_role(),
                    student_id=user_id,
                )
                flash("Parent unlinked", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Parent link failed for %s", user_id)
            flash("System error while linking the parent", "danger")
        return redirect(url_for("edit_user", user_id=user_id))
