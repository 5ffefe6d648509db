# Overview: Flask API routes for products operations; parses input and returns JSON responses.

"""
Product catalog routes.

MULTI-TENANT: every route works on the caller's repository (g.user_id).
Stock is not writable through create/update; use PUT /<id>/stock.
"""
from flask import Blueprint, request, jsonify, current_app

from ..errors import GestiError
from ..models import Product
from ..services import inventory_service, products_service
from ..services.repository import get_repository
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
)
from ..decorators import require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "cost", "stock", "image_url"},
    required_on_create={"name", "price"},
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "cost", "image_url"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products_route():
    """Query params: search (optional substring of the name)."""
    repo = get_repository()
    products = products_service.list_products(repo, search=request.args.get("search"))
    return jsonify({"items": [p.to_dict() for p in products]}), 200


@products_bp.post("")
@require_auth
def create_product_route():
    try:
        payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)

        product = products_service.create_product(get_repository(), patch)
        return jsonify({"product": product.to_dict()}), 201

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    try:
        product = get_repository().require(Product, product_id, "Product")
        return jsonify({"product": product.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    try:
        payload = request.get_json(silent=True) or {}
        if "stock" in payload:
            return jsonify({"error": "stock cannot be set here; use the stock adjustment endpoint"}), 400
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
        enforce_rules_product(patch)

        product = products_service.update_product(get_repository(), product_id, patch)
        return jsonify({"product": product.to_dict()}), 200

    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(get_repository(), product_id)
        return jsonify({"deleted": product_id}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<int:product_id>/stock")
@require_auth
def adjust_stock_route(product_id: int):
    """Set stock to an absolute count. Body: {"stock": int}."""
    try:
        data = request.get_json(silent=True) or {}
        product = inventory_service.adjust_stock(get_repository(), product_id, data.get("stock"))
        return jsonify({"product": product.to_dict()}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>/history")
@require_auth
def stock_history_route(product_id: int):
    try:
        entries = inventory_service.get_stock_history(get_repository(), product_id)
        return jsonify({"items": [e.to_dict() for e in entries]}), 200
    except GestiError as e:
        return jsonify(e.to_dict()), e.status_code
