# Overview: Flask API routes for restock entries; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..services import restock_service
from ..services.repository import get_repository
from ..decorators import require_auth


stock_in_bp = Blueprint("stock_in", __name__, url_prefix="/api/stock-in")


@stock_in_bp.get("")
@require_auth
def list_stock_in_route():
    entries = restock_service.list_stock_in(get_repository())
    return jsonify({"items": [e.to_dict() for e in entries]}), 200


@stock_in_bp.post("")
@require_auth
def add_stock_in_route():
    """Body: {"items": [{"product_id", "quantity"}], "date"?, "reference"?}"""
    try:
        data = request.get_json(silent=True) or {}
        entry = restock_service.add_stock_in(
            get_repository(),
            data.get("items"),
            entry_date=data.get("date"),
            reference=data.get("reference"),
        )
        return jsonify({"entry": entry.to_dict()}), 201
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to record restock")
        return jsonify({"error": "Internal server error"}), 500


@stock_in_bp.put("/<int:entry_id>")
@require_auth
def update_stock_in_route(entry_id: int):
    try:
        data = request.get_json(silent=True) or {}
        entry = restock_service.update_stock_in(
            get_repository(),
            entry_id,
            data.get("items"),
            entry_date=data.get("date"),
            reference=data.get("reference"),
        )
        return jsonify({"entry": entry.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update restock")
        return jsonify({"error": "Internal server error"}), 500


@stock_in_bp.delete("/<int:entry_id>")
@require_auth
def delete_stock_in_route(entry_id: int):
    try:
        restock_service.delete_stock_in(get_repository(), entry_id)
        return jsonify({"deleted": entry_id}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete restock")
        return jsonify({"error": "Internal server error"}), 500
