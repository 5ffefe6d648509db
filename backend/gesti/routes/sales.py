# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

"""
Sales API routes

A sale is committed in one request: lines, payment method, optional contact
and credit term. Stock moves with it; see services/sales_service.py.
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..models import Transaction
from ..services import sales_service
from ..services.repository import get_repository
from ..validation import optional_date
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _sale_args(data: dict) -> dict:
    return {
        "contact_id": data.get("contact_id"),
        "term_days": data.get("term_days"),
        "sale_date": data.get("date"),
    }


@sales_bp.get("")
@require_auth
def list_sales_route():
    """
    Query params:
    - contact_id: int (optional)
    - start, end: YYYY-MM-DD (optional, inclusive)
    """
    try:
        sales = sales_service.list_sales(
            get_repository(),
            contact_id=request.args.get("contact_id", type=int),
            start=optional_date(request.args.get("start"), "start"),
            end=optional_date(request.args.get("end"), "end"),
        )
        return jsonify({"items": [t.to_dict() for t in sales]}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Body:
    {
      "items": [{"product_id": 1, "quantity": 3}],
      "payment_method": "CASH" | "CREDIT" | "TRANSFER",
      "contact_id": 2,          (optional)
      "term_days": 15,          (optional, CREDIT only)
      "date": "2024-05-01T..."  (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        transaction = sales_service.commit_sale(
            get_repository(),
            data.get("items"),
            data.get("payment_method"),
            **_sale_args(data),
        )
        current_app.logger.info(
            "Sale committed: transaction_id=%s total=%s", transaction.id, transaction.total_amount
        )
        return jsonify({"sale": transaction.to_dict()}), 201

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:transaction_id>")
@require_auth
def get_sale_route(transaction_id: int):
    try:
        transaction = get_repository().require(Transaction, transaction_id, "Transaction")
        return jsonify({"sale": transaction.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@sales_bp.put("/<int:transaction_id>")
@require_auth
def update_sale_route(transaction_id: int):
    """Same body as create; replaces the sale's lines and terms."""
    try:
        data = request.get_json(silent=True) or {}
        transaction = sales_service.update_sale(
            get_repository(),
            transaction_id,
            data.get("items"),
            data.get("payment_method"),
            **_sale_args(data),
        )
        return jsonify({"sale": transaction.to_dict()}), 200

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<int:transaction_id>")
@require_auth
def delete_sale_route(transaction_id: int):
    try:
        sales_service.delete_sale(get_repository(), transaction_id)
        return jsonify({"deleted": transaction_id}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:transaction_id>/invoice")
@require_auth
def invoice_route(transaction_id: int):
    """Printable invoice data: sale, contact and company header."""
    try:
        repo = get_repository()
        transaction = repo.require(Transaction, transaction_id, "Transaction")
        info = repo.company_info()
        return jsonify({
            "invoice_label": transaction.invoice_label,
            "sale": transaction.to_dict(),
            "contact": transaction.contact.to_dict() if transaction.contact else None,
            "company": info.to_dict(),
        }), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
