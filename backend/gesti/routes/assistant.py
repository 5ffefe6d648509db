# Overview: Flask API route for the conversational assistant's function calls.

from flask import Blueprint, request, jsonify

from ..assistant import execute_command
from ..services.repository import get_repository
from ..decorators import require_auth


assistant_bp = Blueprint("assistant", __name__, url_prefix="/api/assistant")


@assistant_bp.post("/execute")
@require_auth
def execute_route():
    """
    Body: {"command": "add_sale" | "add_payment" | "update_product", "args": {...}}

    Always 200; the outcome is in the "success" flag so the agent can relay it.
    """
    data = request.get_json(silent=True) or {}
    result = execute_command(get_repository(), data.get("command"), data.get("args"))
    return jsonify(result), 200
