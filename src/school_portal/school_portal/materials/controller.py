from __future__ import annotations

import logging
import os
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import current_user, login_required, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)

STAFF = (Role.ADMIN, Role.OPERATORE, Role.TEACHER)


def _file_size(storage) -> int:
    stream = storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def register(app: Flask, container: Container) -> None:
    @app.route("/materials", endpoint="materials")
    @login_required
    def materials():
        try:
            user = current_user(container.users_repo)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("logout"))

        classes = container.class_service.classes_for_user(user, today=date.today())
        if user.role in (Role.ADMIN, Role.OPERATORE):
            items = container.material_service.list_all()
        else:
            items = container.material_service.list_for_classes([c.class_id for c in classes])

        return render_template(
            "materials/list.html",
            items=items,
            classes=classes,
            class_names={c.class_id: c.name for c in classes},
            active_page="materials",
        )

    @app.route("/materials/upload", methods=["POST"], endpoint="upload_material")
    @roles_required(*STAFF)
    def upload_material():
        upload = request.files.get("file")
        try:
            if upload is None or not upload.filename:
                raise ValidationError("Select a file to upload")
            ids = container.material_service.upload(
                current_user=current_user(container.users_repo),
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                class_ids=request.form.getlist("class_ids"),
                filename=upload.filename,
                stream=upload.stream,
                size=_file_size(upload),
                content_type=upload.mimetype or "application/octet-stream",
                lesson_id=request.form.get("lesson_id") or None,
            )
            flash(f"Material shared with {len(ids)} classes", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Material upload failed")
            flash("System error while uploading the material", "danger")
        return redirect(url_for("materials"))

    @app.route("/materials/<material_id>/edit", methods=["POST"], endpoint="edit_material")
    @roles_required(*STAFF)
    def edit_material(material_id: str):
        try:
            container.material_service.update(
                current_user=current_user(container.users_repo),
                material_id=material_id,
                title=request.form.get("title", ""),
                description=request.form.get("description", ""),
                lesson_id=request.form.get("lesson_id") or None,
            )
            flash("Material updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Material update failed for %s", material_id)
            flash("System error while saving the material", "danger")
        return redirect(url_for("materials"))

    @app.route("/materials/<material_id>/delete", methods=["POST"], endpoint="delete_material")
    @roles_required(*STAFF)
    def delete_material(material_id: str):
        try:
            container.material_service.delete(
                current_user=current_user(container.users_repo),
                material_id=material_id,
            )
            flash("Material deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Material deletion failed for %s", material_id)
            flash("System error while deleting the material", "danger")
        return redirect(url_for("materials"))
