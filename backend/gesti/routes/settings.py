# Overview: Flask API routes for company info and preferences.

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..models import CompanyInfo
from ..services import settings_service
from ..services.repository import get_repository
from ..validation import ModelValidationPolicy, validate_payload
from ..decorators import require_auth

COMPANY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address", "phone", "phone2", "logo_url"},
)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/company")
@require_auth
def get_company_route():
    try:
        info = settings_service.get_company_info(get_repository())
        return jsonify({"company": info.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@settings_bp.put("/company")
@require_auth
def update_company_route():
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=CompanyInfo, payload=payload, policy=COMPANY_POLICY, partial=True)
        info = settings_service.update_company_info(get_repository(), patch)
        return jsonify({"company": info.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update company info")
        return jsonify({"error": "Internal server error"}), 500


@settings_bp.get("/preferences")
@require_auth
def get_preferences_route():
    try:
        info = settings_service.get_company_info(get_repository())
        return jsonify({"preferences": info.preferences_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@settings_bp.put("/preferences")
@require_auth
def update_preferences_route():
    """Body: {"theme": "light" | "dark", "sales_unit_correction": int}"""
    try:
        data = request.get_json(silent=True) or {}
        info = settings_service.update_preferences(
            get_repository(),
            theme=data.get("theme"),
            sales_unit_correction=data.get("sales_unit_correction"),
        )
        return jsonify({"preferences": info.preferences_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update preferences")
        return jsonify({"error": "Internal server error"}), 500
