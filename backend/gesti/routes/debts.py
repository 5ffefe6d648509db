# Overview: Flask API routes for credit debts; read-only views over the ledger.

from flask import Blueprint, jsonify

from ..errors import GestiError
from ..services import debt_service
from ..services.repository import get_repository
from ..decorators import require_auth


debts_bp = Blueprint("debts", __name__, url_prefix="/api/debts")


@debts_bp.get("")
@require_auth
def list_debts_route():
    """Open credit debts, soonest due first, with overdue/due_today/upcoming status."""
    debts = debt_service.open_debts(get_repository())
    return jsonify({
        "items": [d.to_dict() for d in debts],
        "total_outstanding": sum(d.outstanding for d in debts),
    }), 200


@debts_bp.get("/balances")
@require_auth
def balances_route():
    return jsonify({"items": debt_service.contact_balances(get_repository())}), 200


@debts_bp.get("/contacts/<int:contact_id>")
@require_auth
def contact_debts_route(contact_id: int):
    try:
        repo = get_repository()
        outstanding = debt_service.outstanding_for_contact(repo, contact_id)
        debts = debt_service.open_debts(repo, contact_id=contact_id)
        return jsonify({
            "contact_id": contact_id,
            "outstanding": outstanding,
            "items": [d.to_dict() for d in debts],
        }), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
