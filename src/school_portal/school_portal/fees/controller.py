from __future__ import annotations

import csv
import io
import logging
from datetime import date

from flask import Flask, flash, redirect, render_template, request, url_for

from ..common.web import admin_required, current_actor, current_role, parse_date, roles_required
from ..container import Container
from ..core.enums import ActionType, FeeStatus, Role
from ..core.exceptions import AuthorizationError, ValidationError
from .service import CSV_HEADERS, SORT_KEYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _list_args() -> dict:
        return {
            "search": request.args.get("q", ""),
            "status": request.args.get("status", "all"),
            "sort_by": request.args.get("sort", "parent_name"),
            "descending": request.args.get("order", "asc") == "desc",
        }

    @app.route("/admin/fees", endpoint="fees")
    @admin_required
    def fees():
        args = _list_args()
        try:
            accounts = container.fee_service.family_accounts()
            shown = container.fee_service.filter_and_sort(accounts, **args)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("fees"))
        return render_template(
            "fees/list.html",
            accounts=shown,
            totals=container.fee_service.totals(accounts),
            statuses=list(FeeStatus),
            sort_keys=list(SORT_KEYS),
            today=date.today(),
            active_page="fees",
            **args,
        )

    @app.route("/admin/fees/export", endpoint="fees_export")
    @admin_required
    def fees_export():
        args = _list_args()
        try:
            accounts = container.fee_service.filter_and_sort(container.fee_service.family_accounts(), **args)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("fees"))

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for row in container.fee_service.csv_rows(accounts):
            writer.writerow(row)

        container.action_logger.log_action(
            current_actor(),
            ActionType.DATA_EXPORT,
            target_type="family_fees",
            details={"rows": len(accounts)},
        )

        filename = f"family_fees_{date.today().strftime('%Y%m%d')}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/admin/fees/pay", methods=["POST"], endpoint="add_fee_payment")
    @admin_required
    def add_fee_payment():
        try:
            _, receipt_id = container.fee_service.record_payment(
                actor=current_actor(),
                current_role=current_role(),
                parent_contact=request.form.get("parent_contact", ""),
                amount=request.form.get("amount"),
                notes=request.form.get("notes", ""),
                day=parse_date(request.form.get("date")),
            )
            if receipt_id:
                flash("Payment recorded, receipt issued", "success")
                return redirect(url_for("receipt_detail", receipt_id=receipt_id))
            flash("Payment recorded but the receipt could not be issued", "warning")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Recording a fee payment failed")
            flash("System error while recording the payment", "danger")
        return redirect(url_for("fees"))

    @app.route("/admin/fees/payments/<payment_id>/edit", methods=["POST"], endpoint="edit_fee_payment")
    @admin_required
    def edit_fee_payment(payment_id: str):
        try:
            container.fee_service.update_payment(
                actor=current_actor(),
                current_role=current_role(),
                payment_id=payment_id,
                amount=request.form.get("amount"),
            )
            flash("Payment updated", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Fee payment update failed for %s", payment_id)
            flash("System error while saving the payment", "danger")
        return redirect(url_for("fees"))

    @app.route("/admin/fees/payments/<payment_id>/delete", methods=["POST"], endpoint="delete_fee_payment")
    @roles_required(Role.ADMIN)
    def delete_fee_payment(payment_id: str):
        try:
            container.fee_service.delete_payment(
                actor=current_actor(),
                current_role=current_role(),
                payment_id=payment_id,
            )
            flash("Payment deleted", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Fee payment deletion failed for %s", payment_id)
            flash("System error while deleting the payment", "danger")
        return redirect(url_for("fees"))

    @app.route("/admin/fees/exemption", methods=["POST"], endpoint="set_fee_exemption")
    @admin_required
    def set_fee_exemption():
        exempted = request.form.get("exempted") == "1"
        try:
            container.fee_service.set_exemption(
                actor=current_actor(),
                current_role=current_role(),
                parent_contact=request.form.get("parent_contact", ""),
                exempted=exempted,
            )
            flash("Family exempted from the fee" if exempted else "Exemption removed", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except Exception:
            logger.exception("Exemption change failed")
            flash("System error while changing the exemption", "danger")
        return redirect(url_for("fees"))

    @app.route("/admin/receipts", endpoint="receipts")
    @admin_required
    def receipts():
        search = request.args.get("q", "")
        try:
            day = parse_date(request.args.get("date"))
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("receipts"))
        items = container.fee_service.list_receipts(search=search, day=day)
        return render_template(
            "fees/receipts.html",
            items=items,
            total=round(sum(r.amount for r in items), 2),
            search=search,
            day=day,
            active_page="fees",
        )

    @app.route("/admin/receipts/<receipt_id>", endpoint="receipt_detail")
    @admin_required
    def receipt_detail(receipt_id: str):
        try:
            receipt = container.fee_service.get_receipt(receipt_id)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("receipts"))
        return render_template("fees/receipt.html", receipt=receipt, active_page="fees")
