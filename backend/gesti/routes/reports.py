# Overview: Flask API routes for dashboard figures.

from flask import Blueprint, request, jsonify

from ..errors import GestiError
from ..services import reporting_service
from ..services.repository import get_repository
from ..validation import optional_date
from ..decorators import require_auth


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/daily")
@require_auth
def daily_summary_route():
    """Query params: date (YYYY-MM-DD, default business today)."""
    try:
        on = optional_date(request.args.get("date"), "date")
        return jsonify(reporting_service.daily_summary(get_repository(), on=on)), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@reports_bp.get("/top-products")
@require_auth
def top_products_route():
    limit = request.args.get("limit", default=10, type=int)
    limit = max(1, min(limit, 100))
    return jsonify({"items": reporting_service.top_sold_products(get_repository(), limit=limit)}), 200


@reports_bp.get("/inventory-value")
@require_auth
def inventory_value_route():
    return jsonify(reporting_service.inventory_value(get_repository())), 200
