# Overview: Flask API routes for full-tenant export, import and demo reset.

from flask import Blueprint, request, jsonify, current_app, g

from ..errors import GestiError
from ..services import backup_service, demo_data_service
from ..services.repository import get_repository
from ..decorators import require_auth


backup_bp = Blueprint("backup", __name__, url_prefix="/api/backup")


@backup_bp.get("/export")
@require_auth
def export_route():
    try:
        return jsonify(backup_service.export_data(get_repository())), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@backup_bp.post("/import")
@require_auth
def import_route():
    """Replaces ALL of the caller's data with the uploaded document."""
    try:
        data = request.get_json(silent=True)
        counts = backup_service.import_data(get_repository(), data)
        current_app.logger.info("Backup imported for user_id=%s: %s", g.user_id, counts)
        return jsonify({"imported": counts}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to import backup")
        return jsonify({"error": "Internal server error"}), 500


@backup_bp.post("/reset")
@require_auth
def reset_route():
    """Replaces ALL of the caller's data with the demo dataset."""
    try:
        counts = demo_data_service.reset_to_demo(get_repository())
        current_app.logger.info("Data reset to demo for user_id=%s", g.user_id)
        return jsonify({"seeded": counts}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to reset data")
        return jsonify({"error": "Internal server error"}), 500
