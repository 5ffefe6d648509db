"""
Sales Service - the transaction/stock consistency core

WHY: A sale and the stock it consumes must change together. This module owns
the pairing between transaction lines and stock deltas:

- commit_sale: validate availability, decrement stock ('sale' entries),
  freeze unit prices and total, assign the invoice number.
- update_sale: return the original quantities first, re-validate, then apply
  the net delta per product ('sale_update' entries).
- delete_sale: restock every line ('sale_delete' entries) and drop the record.

Every operation validates before mutating and commits as one unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..errors import NotFoundError, ValidationError
from ..models import Contact, Product, Transaction, TransactionItem
from ..models.catalog import REASON_SALE, REASON_SALE_DELETE, REASON_SALE_UPDATE
from ..models.sales import METHOD_CREDIT, PAYMENT_METHODS
from ..validation import require_positive_int
from gesti.time_utils import business_date, coerce_datetime, utcnow
from .inventory_service import apply_stock_change, check_available
from .repository import TenantRepository


@dataclass(frozen=True)
class SaleLineRequest:
    product_id: int
    quantity: int
    unit_price: int | None = None


def normalize_lines(raw_items) -> list[SaleLineRequest]:
    """
    Validate requested lines and merge repeated products into one line.

    Accepts SaleLineRequest objects or dicts with product_id, quantity and an
    optional unit_price override.
    """
    if not raw_items:
        raise ValidationError("A sale needs at least one item")

    merged: dict[int, SaleLineRequest] = {}
    for raw in raw_items:
        if isinstance(raw, SaleLineRequest):
            line = raw
        elif isinstance(raw, dict):
            if raw.get("product_id") is None:
                raise ValidationError("product_id required for every item")
            unit_price = raw.get("unit_price")
            if unit_price is not None and (
                isinstance(unit_price, bool) or not isinstance(unit_price, int) or unit_price < 0
            ):
                raise ValidationError("unit_price must be a non-negative integer")
            line = SaleLineRequest(
                product_id=raw["product_id"],
                quantity=raw.get("quantity"),
                unit_price=unit_price,
            )
        else:
            raise ValidationError("Invalid sale item")

        product_id = require_positive_int(line.product_id, "product_id")
        quantity = require_positive_int(line.quantity, "quantity")
        existing = merged.get(product_id)
        if existing is None:
            merged[product_id] = SaleLineRequest(product_id, quantity, line.unit_price)
        else:
            merged[product_id] = SaleLineRequest(
                product_id,
                existing.quantity + quantity,
                existing.unit_price if existing.unit_price is not None else line.unit_price,
            )

    return list(merged.values())


def compute_due_date(sale_date: datetime, payment_method: str, term_days: int | None) -> date | None:
    """
    Credit due date: the sale day counts as day one, so due = date + (days - 1).
    The sale day is the local business day, not the UTC one.
    """
    if payment_method != METHOD_CREDIT or not term_days:
        return None
    return business_date(sale_date) + timedelta(days=term_days - 1)


def _validate_method(payment_method: str) -> str:
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method: {payment_method}. Must be one of {list(PAYMENT_METHODS)}"
        )
    return payment_method


def _validate_term(term_days) -> int | None:
    if term_days is None:
        return None
    if isinstance(term_days, bool) or not isinstance(term_days, int) or term_days < 0:
        raise ValidationError("term_days must be a non-negative integer")
    return term_days


def _resolve_products(repo: TenantRepository, lines: list[SaleLineRequest]) -> dict[int, Product]:
    products = {}
    for line in lines:
        product = repo.get(Product, line.product_id)
        if product is None:
            raise NotFoundError(f"Product {line.product_id} not found", details={"product_id": line.product_id})
        products[line.product_id] = product
    return products


def _resolve_contact(repo: TenantRepository, contact_id: int | None) -> Contact | None:
    if contact_id is None:
        return None
    return repo.require(Contact, contact_id, "Contact")


def _next_invoice_number(repo: TenantRepository, contact: Contact | None) -> int:
    """Per-contact sequence, or the tenant's walk-in sequence."""
    if contact is not None:
        number = contact.next_invoice_number
        contact.next_invoice_number = number + 1
        return number
    info = repo.company_info()
    number = info.next_invoice_number
    info.next_invoice_number = number + 1
    return number


def _quantities_by_product(items) -> dict[int, int]:
    totals: dict[int, int] = {}
    for item in items:
        if item.product_id is None:
            continue
        totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity
    return totals


def _build_items(
    lines: list[SaleLineRequest],
    products: dict[int, Product],
    price_snapshots: dict[int, int] | None = None,
) -> list[TransactionItem]:
    price_snapshots = price_snapshots or {}
    items = []
    for line in lines:
        product = products[line.product_id]
        if line.unit_price is not None:
            unit_price = line.unit_price
        else:
            unit_price = price_snapshots.get(line.product_id, product.price)
        items.append(TransactionItem(
            product_id=product.id,
            product_name=product.name,
            quantity=line.quantity,
            unit_price=unit_price,
        ))
    return items


def commit_sale(
    repo: TenantRepository,
    items,
    payment_method: str,
    *,
    contact_id: int | None = None,
    term_days: int | None = None,
    sale_date=None,
) -> Transaction:
    """
    Record a new sale and take its quantities out of stock.

    Raises:
        ValidationError: bad lines, payment method or term
        NotFoundError: unknown product or contact
        InsufficientStockError: any product short; nothing is applied
    """
    lines = normalize_lines(items)
    _validate_method(payment_method)
    term_days = _validate_term(term_days)
    try:
        occurred = coerce_datetime(sale_date)
    except ValueError:
        raise ValidationError("date must be an ISO-8601 date or datetime")

    products = _resolve_products(repo, lines)
    contact = _resolve_contact(repo, contact_id)

    requested = {line.product_id: line.quantity for line in lines}
    check_available(products, requested)

    with repo.atomic():
        transaction = Transaction(
            invoice_number=_next_invoice_number(repo, contact),
            date=occurred,
            payment_method=payment_method,
            contact_id=contact.id if contact else None,
            due_date=compute_due_date(occurred, payment_method, term_days),
        )
        transaction.items = _build_items(lines, products)
        transaction.total_amount = sum(item.subtotal for item in transaction.items)
        repo.add(transaction)

        for product_id, qty in requested.items():
            apply_stock_change(
                products[product_id],
                -qty,
                REASON_SALE,
                occurred_at=occurred,
                transaction_id=transaction.id,
            )

    return transaction


def update_sale(
    repo: TenantRepository,
    transaction_id: int,
    items,
    payment_method: str,
    *,
    contact_id: int | None = None,
    term_days: int | None = None,
    sale_date=None,
) -> Transaction:
    """
    Replace a sale's lines and terms.

    The original quantities are treated as returned to stock before the new
    ones are checked, so lowering a quantity never fails for lack of stock.
    Products whose net change is zero get no history entry.

    term_days=None keeps the existing due date of a credit sale that stays
    credit; an explicit value recomputes it from the (possibly new) date.
    """
    transaction = repo.require(Transaction, transaction_id, "Transaction")

    lines = normalize_lines(items)
    _validate_method(payment_method)
    term_days = _validate_term(term_days)
    try:
        occurred = coerce_datetime(sale_date) if sale_date is not None else transaction.date
    except ValueError:
        raise ValidationError("date must be an ISO-8601 date or datetime")

    products = _resolve_products(repo, lines)
    contact = _resolve_contact(repo, contact_id)

    reserved = _quantities_by_product(transaction.items)
    requested = {line.product_id: line.quantity for line in lines}
    check_available(products, requested, reserved)

    # Lines already on the sale keep the price they were sold at
    price_snapshots = {
        item.product_id: item.unit_price
        for item in transaction.items
        if item.product_id is not None
    }
    new_items = _build_items(lines, products, price_snapshots)
    new_total = sum(item.subtotal for item in new_items)
    if new_total < transaction.total_paid:
        raise ValidationError(
            "New total is below the amount already paid",
            details={"new_total": new_total, "total_paid": transaction.total_paid},
        )

    if payment_method == METHOD_CREDIT and term_days is None:
        due_date = transaction.due_date if transaction.payment_method == METHOD_CREDIT else None
    else:
        due_date = compute_due_date(occurred, payment_method, term_days)

    with repo.atomic():
        for product_id in sorted(set(reserved) | set(requested)):
            net = reserved.get(product_id, 0) - requested.get(product_id, 0)
            if net == 0:
                continue
            product = products.get(product_id) or repo.get(Product, product_id)
            if product is None:
                continue
            apply_stock_change(
                product,
                net,
                REASON_SALE_UPDATE,
                occurred_at=occurred,
                transaction_id=transaction.id,
            )

        if (contact.id if contact else None) != transaction.contact_id:
            transaction.invoice_number = _next_invoice_number(repo, contact)
            transaction.contact_id = contact.id if contact else None

        transaction.items = new_items
        transaction.total_amount = new_total
        transaction.date = occurred
        transaction.payment_method = payment_method
        transaction.due_date = due_date

    return transaction


def delete_sale(repo: TenantRepository, transaction_id: int) -> None:
    """
    Delete a sale and put its quantities back in stock.

    A second delete of the same id raises NotFoundError; the restock only
    ever happens once because the record is gone after the first commit.
    """
    transaction = repo.require(Transaction, transaction_id, "Transaction")
    returned = _quantities_by_product(transaction.items)
    now = utcnow()

    with repo.atomic():
        for product_id, qty in returned.items():
            product = repo.get(Product, product_id)
            if product is None:
                continue
            apply_stock_change(
                product,
                qty,
                REASON_SALE_DELETE,
                occurred_at=now,
                transaction_id=transaction.id,
            )
        repo.delete(transaction)


def list_sales(
    repo: TenantRepository,
    *,
    contact_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[Transaction]:
    """Sales newest first, optionally filtered by contact and inclusive date range."""
    sales = repo.all(Transaction)
    if contact_id is not None:
        sales = [t for t in sales if t.contact_id == contact_id]
    if start is not None:
        sales = [t for t in sales if business_date(t.date) >= start]
    if end is not None:
        sales = [t for t in sales if business_date(t.date) <= end]
    return sorted(sales, key=lambda t: (t.date, t.id), reverse=True)
