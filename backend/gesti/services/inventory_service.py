# Overview: Service-layer operations for inventory; the single place where product stock changes.

"""
Gesti Inventory Invariants (authoritative)

Stock model:
- Product.stock is a stored integer that is never negative after a commit.
- Every change to Product.stock goes through apply_stock_change(), which appends
  exactly one StockHistoryEntry recording the signed delta and its reason.
- The history is append-only. Deleting a sale or restock adds a compensating
  entry; it never removes earlier entries.

Reason codes:
- initial: opening stock when the product is created
- sale / sale_update / sale_delete: driven by the transaction ledger
- restock / restock_update / restock_delete: driven by StockInEntry
- adjustment: manual correction to an absolute count
"""

from __future__ import annotations

from datetime import datetime

from ..errors import InsufficientStockError, ValidationError
from ..models import Product, StockHistoryEntry
from ..models.catalog import REASON_ADJUSTMENT, STOCK_REASONS
from gesti.time_utils import coerce_datetime
from .repository import TenantRepository


def apply_stock_change(
    product: Product,
    change: int,
    reason: str,
    *,
    occurred_at: datetime | str | None = None,
    transaction_id: int | None = None,
    stock_in_id: int | None = None,
) -> StockHistoryEntry:
    """
    Change product stock by a signed delta and append the paired history entry.

    Raises InsufficientStockError if the result would be negative; the product
    is left untouched in that case.
    """
    if reason not in STOCK_REASONS:
        raise ValueError(f"unknown stock reason: {reason}")

    new_stock = product.stock + change
    if new_stock < 0:
        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            requested=-change,
            available=product.stock,
        )

    entry = StockHistoryEntry(
        occurred_at=coerce_datetime(occurred_at),
        change=change,
        reason=reason,
        transaction_id=transaction_id,
        stock_in_id=stock_in_id,
    )
    product.stock = new_stock
    product.stock_history.append(entry)
    return entry


def check_available(
    products: dict[int, Product],
    requested: dict[int, int],
    reserved: dict[int, int] | None = None,
) -> None:
    """
    Verify requested quantities against stock plus any quantity already
    reserved by the document being replaced. Raises on the first product
    that comes up short, before anything is mutated.
    """
    reserved = reserved or {}
    for product_id, qty in requested.items():
        product = products[product_id]
        available = product.stock + reserved.get(product_id, 0)
        if available < qty:
            raise InsufficientStockError(
                product_id=product.id,
                product_name=product.name,
                requested=qty,
                available=available,
            )


def adjust_stock(repo: TenantRepository, product_id: int, new_stock) -> Product:
    """
    Manual stock correction to an absolute value.

    delta = new - old is recorded with reason 'adjustment'. Negative targets
    are rejected before any mutation.
    """
    if isinstance(new_stock, bool) or not isinstance(new_stock, int):
        raise ValidationError("stock must be an integer")
    if new_stock < 0:
        raise ValidationError("stock must be >= 0", details={"stock": new_stock})

    product = repo.require(Product, product_id, "Product")

    with repo.atomic():
        apply_stock_change(product, new_stock - product.stock, REASON_ADJUSTMENT)

    return product


def get_stock_history(repo: TenantRepository, product_id: int) -> list[StockHistoryEntry]:
    product = repo.require(Product, product_id, "Product")
    return list(product.stock_history)
