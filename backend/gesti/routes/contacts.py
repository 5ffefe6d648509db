# Overview: Flask API routes for contacts operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..models import Contact
from ..services import contact_service
from ..services.repository import get_repository
from ..validation import ModelValidationPolicy, validate_payload
from ..decorators import require_auth

CONTACT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone"},
    required_on_create={"name"},
)

contacts_bp = Blueprint("contacts", __name__, url_prefix="/api/contacts")


@contacts_bp.get("")
@require_auth
def list_contacts_route():
    contacts = contact_service.list_contacts(get_repository())
    return jsonify({"items": [c.to_dict() for c in contacts]}), 200


@contacts_bp.post("")
@require_auth
def create_contact_route():
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Contact, payload=payload, policy=CONTACT_POLICY, partial=False)
        contact = contact_service.create_contact(get_repository(), patch)
        return jsonify({"contact": contact.to_dict()}), 201
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create contact")
        return jsonify({"error": "Internal server error"}), 500


@contacts_bp.put("/<int:contact_id>")
@require_auth
def update_contact_route(contact_id: int):
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Contact, payload=payload, policy=CONTACT_POLICY, partial=True)
        contact = contact_service.update_contact(get_repository(), contact_id, patch)
        return jsonify({"contact": contact.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update contact")
        return jsonify({"error": "Internal server error"}), 500


@contacts_bp.delete("/<int:contact_id>")
@require_auth
def delete_contact_route(contact_id: int):
    try:
        contact_service.delete_contact(get_repository(), contact_id)
        return jsonify({"deleted": contact_id}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete contact")
        return jsonify({"error": "Internal server error"}), 500
