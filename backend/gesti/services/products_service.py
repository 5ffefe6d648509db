# backend/gesti/services/products_service.py
"""
Products Service

MULTI-TENANT: every operation goes through the caller's TenantRepository.
Stock is not a writable product field; opening stock is recorded as an
'initial' history entry and later changes go through inventory_service.
"""
from __future__ import annotations

from ..errors import ValidationError
from ..models import Product, TransactionItem, StockInItem
from ..models.catalog import REASON_ADJUSTMENT, REASON_INITIAL
from .inventory_service import apply_stock_change
from .repository import TenantRepository

PRODUCT_MUTABLE_FIELDS = {"name", "price", "cost", "image_url"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(repo: TenantRepository, search: str | None = None) -> list[Product]:
    products = sorted(repo.all(Product), key=lambda p: (p.name.lower(), p.id))
    if search:
        needle = search.strip().lower()
        products = [p for p in products if needle in p.name.lower()]
    return products


def create_product(repo: TenantRepository, patch: dict) -> Product:
    """Create product; opening stock (default 0) gets an 'initial' history entry."""
    opening_stock = patch.get("stock") or 0

    with repo.atomic():
        product = Product(stock=0)
        apply_product_patch(product, patch)
        repo.add(product)
        apply_stock_change(product, opening_stock, REASON_INITIAL)

    return product


def update_product(repo: TenantRepository, product_id: int, patch: dict, *, stock=None) -> Product:
    """
    Apply a field patch and, when `stock` is given, an absolute stock
    adjustment. Both land in one commit or neither does.
    """
    if stock is not None and (isinstance(stock, bool) or not isinstance(stock, int) or stock < 0):
        raise ValidationError("stock must be a non-negative integer", details={"stock": stock})
    product = repo.require(Product, product_id, "Product")
    with repo.atomic():
        apply_product_patch(product, patch)
        if stock is not None:
            apply_stock_change(product, stock - product.stock, REASON_ADJUSTMENT)
    return product


def delete_product(repo: TenantRepository, product_id: int) -> None:
    """
    Delete product and its stock history.

    Sale and restock lines keep their snapshot but lose the product link,
    so later sale deletions skip restocking a product that no longer exists.
    """
    product = repo.require(Product, product_id, "Product")

    with repo.atomic():
        repo.session.query(TransactionItem).filter_by(product_id=product.id).update(
            {TransactionItem.product_id: None}, synchronize_session="fetch"
        )
        repo.session.query(StockInItem).filter_by(product_id=product.id).update(
            {StockInItem.product_id: None}, synchronize_session="fetch"
        )
        repo.delete(product)
