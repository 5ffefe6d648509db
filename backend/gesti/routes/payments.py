# Overview: Flask API routes for payment operations; parses input and returns JSON responses.

"""
Payment API routes

Payments on a transaction are addressed by position (0-based index).
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..services import payment_service
from ..services.repository import get_repository
from ..decorators import require_auth


payments_bp = Blueprint("payments", __name__, url_prefix="/api")


@payments_bp.post("/sales/<int:transaction_id>/payments")
@require_auth
def add_payment_route(transaction_id: int):
    """Body: {"amount": int, "date": ISO-8601 (optional)}"""
    try:
        data = request.get_json(silent=True) or {}
        repo = get_repository()
        payment = payment_service.add_payment(repo, transaction_id, data.get("amount"), paid_at=data.get("date"))
        transaction = payment.transaction
        return jsonify({"payment": payment.to_dict(), "sale": transaction.to_dict()}), 201

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add payment")
        return jsonify({"error": "Internal server error"}), 500


@payments_bp.put("/sales/<int:transaction_id>/payments/<int:index>")
@require_auth
def update_payment_route(transaction_id: int, index: int):
    try:
        data = request.get_json(silent=True) or {}
        payment = payment_service.update_payment(get_repository(), transaction_id, index, data.get("amount"))
        return jsonify({"payment": payment.to_dict(), "sale": payment.transaction.to_dict()}), 200

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update payment")
        return jsonify({"error": "Internal server error"}), 500


@payments_bp.delete("/sales/<int:transaction_id>/payments/<int:index>")
@require_auth
def delete_payment_route(transaction_id: int, index: int):
    try:
        payment_service.delete_payment(get_repository(), transaction_id, index)
        return jsonify({"deleted": index}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete payment")
        return jsonify({"error": "Internal server error"}), 500


@payments_bp.post("/contacts/<int:contact_id>/payments")
@require_auth
def apply_contact_payment_route(contact_id: int):
    """Apply a payment to the contact's oldest open credit debt."""
    try:
        data = request.get_json(silent=True) or {}
        transaction, payment = payment_service.apply_payment_to_contact(
            get_repository(), contact_id, data.get("amount")
        )
        return jsonify({"payment": payment.to_dict(), "sale": transaction.to_dict()}), 201

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to apply contact payment")
        return jsonify({"error": "Internal server error"}), 500
