# Overview: Service-layer operations for restock entries; inbound stock with paired history entries.

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..models import Product, StockInEntry, StockInItem
from ..models.catalog import REASON_RESTOCK, REASON_RESTOCK_DELETE, REASON_RESTOCK_UPDATE
from ..validation import require_positive_int
from gesti.time_utils import coerce_datetime, utcnow
from .inventory_service import apply_stock_change, check_available
from .repository import TenantRepository


def _normalize_items(raw_items) -> dict[int, int]:
    if not raw_items:
        raise ValidationError("A restock needs at least one item")
    quantities: dict[int, int] = {}
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("Invalid restock item")
        product_id = require_positive_int(raw.get("product_id"), "product_id")
        qty = require_positive_int(raw.get("quantity"), "quantity")
        quantities[product_id] = quantities.get(product_id, 0) + qty
    return quantities


def _products_for(repo: TenantRepository, product_ids) -> dict[int, Product]:
    products = {}
    for product_id in product_ids:
        product = repo.get(Product, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
        products[product_id] = product
    return products


def _entry_quantities(entry: StockInEntry) -> dict[int, int]:
    quantities: dict[int, int] = {}
    for item in entry.items:
        if item.product_id is None:
            continue
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def _parse_date(value):
    try:
        return coerce_datetime(value)
    except ValueError:
        raise ValidationError("date must be an ISO-8601 date or datetime")


def list_stock_in(repo: TenantRepository) -> list[StockInEntry]:
    return sorted(repo.all(StockInEntry), key=lambda e: (e.date, e.id), reverse=True)


def add_stock_in(repo: TenantRepository, items, *, entry_date=None, reference: str | None = None) -> StockInEntry:
    quantities = _normalize_items(items)
    occurred = _parse_date(entry_date)
    products = _products_for(repo, quantities)

    with repo.atomic():
        entry = StockInEntry(date=occurred, reference=(reference or "").strip() or None)
        entry.items = [StockInItem(product_id=pid, quantity=qty) for pid, qty in quantities.items()]
        repo.add(entry)
        for product_id, qty in quantities.items():
            apply_stock_change(products[product_id], qty, REASON_RESTOCK, occurred_at=occurred, stock_in_id=entry.id)

    return entry


def update_stock_in(
    repo: TenantRepository,
    entry_id: int,
    items,
    *,
    entry_date=None,
    reference: str | None = None,
) -> StockInEntry:
    """
    Replace a restock's lines. Lowering a restocked quantity takes stock back
    out, which fails if that stock has since been sold.
    """
    entry = repo.require(StockInEntry, entry_id, "Stock-in entry")
    quantities = _normalize_items(items)
    occurred = _parse_date(entry_date) if entry_date is not None else entry.date
    original = _entry_quantities(entry)

    products = _products_for(repo, quantities)
    for product_id in original:
        product = repo.get(Product, product_id)
        if product is not None:
            products[product_id] = product

    deltas = {
        pid: quantities.get(pid, 0) - original.get(pid, 0)
        for pid in set(original) | set(quantities)
        if pid in products
    }
    check_available(products, {pid: -d for pid, d in deltas.items() if d < 0})

    with repo.atomic():
        for product_id in sorted(deltas):
            if deltas[product_id] == 0:
                continue
            apply_stock_change(
                products[product_id],
                deltas[product_id],
                REASON_RESTOCK_UPDATE,
                occurred_at=occurred,
                stock_in_id=entry.id,
            )
        entry.items = [StockInItem(product_id=pid, quantity=qty) for pid, qty in quantities.items()]
        entry.date = occurred
        if reference is not None:
            entry.reference = reference.strip() or None

    return entry


def delete_stock_in(repo: TenantRepository, entry_id: int) -> None:
    entry = repo.require(StockInEntry, entry_id, "Stock-in entry")
    original = _entry_quantities(entry)
    products = {}
    for product_id in original:
        product = repo.get(Product, product_id)
        if product is not None:
            products[product_id] = product
    check_available(products, {pid: original[pid] for pid in products})

    now = utcnow()
    with repo.atomic():
        for product_id, qty in original.items():
            if product_id not in products:
                continue
            apply_stock_change(products[product_id], -qty, REASON_RESTOCK_DELETE, occurred_at=now, stock_in_id=entry.id)
        repo.delete(entry)
