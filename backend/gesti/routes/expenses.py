# Overview: Flask API routes for expenses operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..models import Expense
from ..services import expense_service
from ..services.repository import get_repository
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_expense,
    optional_date,
)
from ..decorators import require_auth

EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"description", "amount", "category", "date"},
    required_on_create={"description", "amount"},
)

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
@require_auth
def list_expenses_route():
    """Query params: start, end (YYYY-MM-DD, inclusive), category."""
    try:
        expenses = expense_service.list_expenses(
            get_repository(),
            start=optional_date(request.args.get("start"), "start"),
            end=optional_date(request.args.get("end"), "end"),
            category=request.args.get("category"),
        )
        return jsonify({"items": [e.to_dict() for e in expenses]}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@expenses_bp.post("")
@require_auth
def create_expense_route():
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
        enforce_rules_expense(patch)
        expense = expense_service.create_expense(get_repository(), patch)
        return jsonify({"expense": expense.to_dict()}), 201
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.put("/<int:expense_id>")
@require_auth
def update_expense_route(expense_id: int):
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=True)
        enforce_rules_expense(patch)
        expense = expense_service.update_expense(get_repository(), expense_id, patch)
        return jsonify({"expense": expense.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update expense")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.delete("/<int:expense_id>")
@require_auth
def delete_expense_route(expense_id: int):
    try:
        expense_service.delete_expense(get_repository(), expense_id)
        return jsonify({"deleted": expense_id}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete expense")
        return jsonify({"error": "Internal server error"}), 500
