# Overview: Error hierarchy shared by services, routes and the assistant boundary.

from __future__ import annotations


class GestiError(Exception):
    """Base error for bookkeeping operations."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(GestiError, ValueError):
    """400-level input problem (non-positive amount, negative stock target, ...)."""


class InsufficientStockError(GestiError):
    """Requested quantity exceeds available stock for a product."""

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        shortfall = requested - available
        super().__init__(
            f"Insufficient stock for {product_name}: short by {shortfall}",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested_quantity": requested,
                "available": available,
                "shortfall": shortfall,
            },
        )
        self.product_id = product_id
        self.product_name = product_name
        self.shortfall = shortfall


class NotFoundError(GestiError):
    """Entity id or name could not be resolved for the current tenant."""
    status_code = 404


class PersistenceError(GestiError):
    """The backing store rejected or failed the write."""
    status_code = 503


class ConflictError(GestiError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409
