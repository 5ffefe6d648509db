# Overview: Runs assistant commands against the services; never raises across the boundary.

"""
Assistant Dispatcher

execute_command() is the only entry point the chat agent uses. Every outcome
is a plain dict the agent can relay in natural language:

    {"success": True, "message": ..., ...}
    {"success": False, "error": ..., "error_type": ...}
"""

from __future__ import annotations

from flask import current_app

from ..errors import GestiError
from ..services import payment_service, products_service, sales_service
from ..services.debt_service import outstanding_for_contact
from ..services.repository import TenantRepository
from ..services.resolver import resolve_contact, resolve_product
from .commands import AddPayment, AddSale, UpdateProduct, parse_command


def _add_sale(command: AddSale, repo: TenantRepository) -> dict:
    lines = []
    for item in command.items:
        product = resolve_product(repo, item.product_name).unwrap()
        lines.append({"product_id": product.id, "quantity": item.quantity})

    contact = None
    if command.contact_name:
        contact = resolve_contact(repo, command.contact_name).unwrap()

    transaction = sales_service.commit_sale(
        repo,
        lines,
        command.payment_method,
        contact_id=contact.id if contact else None,
        term_days=command.term_days,
    )
    return {
        "success": True,
        "message": f"Sale {transaction.invoice_label} recorded for {transaction.total_amount}",
        "transaction_id": transaction.id,
        "invoice_label": transaction.invoice_label,
        "total_amount": transaction.total_amount,
        "contact_name": contact.name if contact else None,
        "items": [
            {"product_name": i.product_name, "quantity": i.quantity, "unit_price": i.unit_price}
            for i in transaction.items
        ],
    }


def _add_payment(command: AddPayment, repo: TenantRepository) -> dict:
    contact = resolve_contact(repo, command.contact_name).unwrap()
    transaction, payment = payment_service.apply_payment_to_contact(repo, contact.id, command.amount)
    return {
        "success": True,
        "message": f"Payment of {payment.amount} applied to invoice {transaction.invoice_label}",
        "contact_name": contact.name,
        "transaction_id": transaction.id,
        "amount": payment.amount,
        "transaction_outstanding": transaction.outstanding,
        "contact_outstanding": outstanding_for_contact(repo, contact.id),
    }


def _update_product(command: UpdateProduct, repo: TenantRepository) -> dict:
    product = resolve_product(repo, command.product_name).unwrap()
    fields = dict(command.fields)
    new_stock = fields.pop("stock", None)

    products_service.update_product(repo, product.id, fields, stock=new_stock)

    return {
        "success": True,
        "message": f"Product {product.name} updated",
        "product": product.to_dict(),
    }


HANDLERS = {
    AddSale: _add_sale,
    AddPayment: _add_payment,
    UpdateProduct: _update_product,
}


def run(command, repo: TenantRepository) -> dict:
    return HANDLERS[type(command)](command, repo)


def execute_command(repo: TenantRepository, name: str, args) -> dict:
    """Validate and run one assistant command. Never raises."""
    try:
        command = parse_command(name, args)
        result = run(command, repo)
        current_app.logger.info("Assistant command %s succeeded for user_id=%s", name, repo.user_id)
        return result
    except GestiError as e:
        current_app.logger.info("Assistant command %s rejected: %s", name, e)
        payload = {"success": False, "error": str(e), "error_type": type(e).__name__}
        if e.details:
            payload["details"] = e.details
        return payload
    except Exception:
        current_app.logger.exception("Assistant command %s failed", name)
        return {"success": False, "error": "Internal error while running the command", "error_type": "InternalError"}
