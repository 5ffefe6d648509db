# Overview: Full-tenant JSON export and replace-all import.

"""
Backup Service

Export is a direct serialization of the tenant's data in the browser app's
backup layout (camelCase keys, string ids). There is no version field.

Import fully replaces the tenant's data inside one database transaction.
Ids in the file are treated as opaque keys and remapped to new rows. The
file must contain products, transactions and companyInfo; other collections
default to empty.
"""

from __future__ import annotations

from typing import Any

from ..errors import ValidationError
from ..models import (
    Contact,
    Expense,
    Payment,
    Product,
    StockHistoryEntry,
    StockInEntry,
    StockInItem,
    Transaction,
    TransactionItem,
)
from ..models.catalog import REASON_INITIAL, STOCK_REASONS
from ..models.sales import METHOD_CREDIT, normalize_payment_method
from ..models.settings import THEME_DARK, THEME_LIGHT
from gesti.time_utils import coerce_datetime, parse_iso_date, to_iso_date, to_utc_z
from .repository import TenantRepository

REQUIRED_KEYS = ("products", "transactions", "companyInfo")


# =============================================================================
# EXPORT
# =============================================================================

def _history_to_dict(entry: StockHistoryEntry) -> dict:
    data = {"date": to_utc_z(entry.occurred_at), "change": entry.change, "reason": entry.reason}
    if entry.transaction_id is not None:
        data["transactionId"] = str(entry.transaction_id)
    if entry.stock_in_id is not None:
        data["stockInId"] = str(entry.stock_in_id)
    return data


def _transaction_to_dict(t: Transaction) -> dict:
    data = {
        "id": str(t.id),
        "invoiceNumber": t.invoice_number,
        "items": [
            {
                "productId": str(item.product_id) if item.product_id is not None else None,
                "productName": item.product_name,
                "quantity": item.quantity,
                "unitPrice": item.unit_price,
            }
            for item in t.items
        ],
        "totalAmount": t.total_amount,
        "date": to_utc_z(t.date),
        "paymentMethod": t.payment_method,
        "payments": [{"amount": p.amount, "date": to_utc_z(p.paid_at)} for p in t.payments],
    }
    if t.contact_id is not None:
        data["contactId"] = str(t.contact_id)
    if t.due_date is not None:
        data["dueDate"] = to_iso_date(t.due_date)
    return data


def export_data(repo: TenantRepository) -> dict:
    info = repo.company_info()
    return {
        "products": [
            {
                "id": str(p.id),
                "name": p.name,
                "price": p.price,
                "cost": p.cost,
                "stock": p.stock,
                "imageUrl": p.image_url or "",
                "stockHistory": [_history_to_dict(e) for e in p.stock_history],
            }
            for p in repo.all(Product)
        ],
        "transactions": [_transaction_to_dict(t) for t in repo.all(Transaction)],
        "expenses": [
            {
                "id": str(e.id),
                "description": e.description,
                "amount": e.amount,
                "category": e.category,
                "date": to_utc_z(e.date),
            }
            for e in repo.all(Expense)
        ],
        "contacts": [
            {
                "id": str(c.id),
                "name": c.name,
                "phone": c.phone or "",
                "nextInvoiceNumber": c.next_invoice_number,
            }
            for c in repo.all(Contact)
        ],
        "companyInfo": {
            "name": info.name,
            "address": info.address or "",
            "phone": info.phone or "",
            "phone2": info.phone2 or "",
            "logoUrl": info.logo_url or "",
        },
        "stockInEntries": [
            {
                "id": str(s.id),
                "date": to_utc_z(s.date),
                "reference": s.reference,
                "items": [
                    {"productId": str(i.product_id) if i.product_id is not None else None, "quantity": i.quantity}
                    for i in s.items
                ],
            }
            for s in repo.all(StockInEntry)
        ],
        "theme": info.theme,
        "salesUnitCorrection": info.sales_unit_correction,
    }


# =============================================================================
# IMPORT
# =============================================================================

def _to_int(value: Any, field: str, default: int | None = None) -> int | None:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value))
    try:
        return int(round(float(str(value).strip())))
    except ValueError:
        raise ValidationError(f"{field} must be a number")


def _to_amount(value: Any, field: str, default: int = 0) -> int:
    """Money or quantity that may be zero but never negative."""
    amount = _to_int(value, field, default)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", details={field: amount})
    return amount


def _to_positive(value: Any, field: str) -> int:
    amount = _to_int(value, field, 0)
    if amount <= 0:
        raise ValidationError(f"{field} must be positive", details={field: amount})
    return amount


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _to_datetime(value: Any, field: str):
    try:
        return coerce_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO-8601 date")


def _to_method(value: Any) -> str:
    method = normalize_payment_method(value)
    if method is None:
        raise ValidationError(f"Unknown payment method: {value}")
    return method


def _key(value: Any) -> str | None:
    return None if value is None else str(value)


def _rows(value: Any, key: str) -> list[dict]:
    """A list of objects, or an empty list when the key is missing."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be a list")
    for row in value:
        if not isinstance(row, dict):
            raise ValidationError(f"Every entry of {key} must be an object")
    return value


def clear_tenant_data(repo: TenantRepository) -> None:
    """Delete every business row the tenant owns (settings row is kept)."""
    for model in (Transaction, StockInEntry, Expense, Contact, Product):
        for row in repo.all(model):
            repo.delete(row)
    repo.session.flush()
    repo.invalidate()


def import_data(repo: TenantRepository, data: Any) -> dict:
    """
    Replace every collection of the tenant with the content of `data`.

    Returns counts of imported rows. Raises ValidationError (nothing applied)
    if the document is malformed, an amount or quantity is out of range, or
    a transaction's payments exceed its total.
    """
    if not isinstance(data, dict) or any(key not in data or data[key] is None for key in REQUIRED_KEYS):
        raise ValidationError("The import file is invalid or corrupt")
    if not isinstance(data["companyInfo"], dict):
        raise ValidationError("companyInfo must be an object")

    theme = data.get("theme") or THEME_LIGHT
    if theme not in (THEME_LIGHT, THEME_DARK):
        raise ValidationError(f"Unknown theme: {theme}")

    product_rows = _rows(data["products"], "products")
    contact_rows = _rows(data.get("contacts"), "contacts")
    transaction_rows = _rows(data["transactions"], "transactions")
    expense_rows = _rows(data.get("expenses"), "expenses")
    stock_in_rows = _rows(data.get("stockInEntries"), "stockInEntries")

    with repo.atomic():
        clear_tenant_data(repo)

        products: dict[str, Product] = {}
        # history entries whose sale / restock link is resolved once those rows exist
        pending_links: list[tuple[StockHistoryEntry, str | None, str | None]] = []
        for raw in product_rows:
            name = _to_text(raw.get("name"))
            if not name:
                raise ValidationError("Every product needs a name")
            stock = _to_amount(raw.get("stock"), "stock")
            product = Product(
                name=name,
                price=_to_amount(raw.get("price"), "price"),
                cost=_to_amount(raw.get("cost"), "cost"),
                stock=stock,
                image_url=_to_text(raw.get("imageUrl")),
            )
            history = _rows(raw.get("stockHistory"), "stockHistory")
            if history:
                for h in history:
                    reason = h.get("reason") or REASON_INITIAL
                    if reason not in STOCK_REASONS:
                        raise ValidationError(f"Unknown stock history reason: {reason}")
                    entry = StockHistoryEntry(
                        occurred_at=_to_datetime(h.get("date"), "stockHistory.date"),
                        change=_to_int(h.get("change"), "stockHistory.change", 0),
                        reason=reason,
                    )
                    product.stock_history.append(entry)
                    pending_links.append((entry, _key(h.get("transactionId")), _key(h.get("stockInId"))))
            else:
                product.stock_history.append(StockHistoryEntry(
                    occurred_at=coerce_datetime(None), change=stock, reason=REASON_INITIAL,
                ))
            repo.add(product)
            products[_key(raw.get("id")) or f"new-{product.id}"] = product

        contacts: dict[str, Contact] = {}
        for raw in contact_rows:
            name = _to_text(raw.get("name"))
            if not name:
                raise ValidationError("Every contact needs a name")
            contact = Contact(
                name=name,
                phone=_to_text(raw.get("phone")),
                next_invoice_number=_to_positive(raw.get("nextInvoiceNumber") or 1, "nextInvoiceNumber"),
            )
            repo.add(contact)
            contacts[_key(raw.get("id")) or f"new-{contact.id}"] = contact

        transactions: dict[str, Transaction] = {}
        walk_in_max = 0
        contact_max: dict[int, int] = {}
        for position, raw in enumerate(transaction_rows, start=1):
            contact = contacts.get(_key(raw.get("contactId")))
            transaction = Transaction(
                invoice_number=_to_positive(raw.get("invoiceNumber") or position, "invoiceNumber"),
                date=_to_datetime(raw.get("date"), "date"),
                payment_method=_to_method(raw.get("paymentMethod")),
                contact_id=contact.id if contact else None,
            )
            if raw.get("dueDate") and transaction.payment_method == METHOD_CREDIT:
                try:
                    transaction.due_date = parse_iso_date(str(raw["dueDate"]))
                except ValueError:
                    raise ValidationError("dueDate must be an ISO-8601 date")

            for item in _rows(raw.get("items"), "items"):
                product = products.get(_key(item.get("productId")))
                transaction.items.append(TransactionItem(
                    product_id=product.id if product else None,
                    product_name=product.name if product else (_to_text(item.get("productName")) or "Unknown product"),
                    quantity=_to_positive(item.get("quantity"), "quantity"),
                    unit_price=_to_amount(item.get("unitPrice"), "unitPrice"),
                ))
            computed = sum(item.subtotal for item in transaction.items)
            transaction.total_amount = _to_amount(raw.get("totalAmount"), "totalAmount", computed)

            for p in _rows(raw.get("payments"), "payments"):
                transaction.payments.append(Payment(
                    amount=_to_positive(p.get("amount"), "payments.amount"),
                    paid_at=_to_datetime(p.get("date"), "payments.date"),
                ))
            if transaction.total_paid > transaction.total_amount:
                raise ValidationError(
                    "Imported payments exceed the transaction total",
                    details={"transaction": _key(raw.get("id"))},
                )
            repo.add(transaction)
            if raw.get("id") is not None:
                transactions[_key(raw["id"])] = transaction

            if contact is None:
                walk_in_max = max(walk_in_max, transaction.invoice_number)
            else:
                contact_max[contact.id] = max(contact_max.get(contact.id, 0), transaction.invoice_number)

        for contact in contacts.values():
            contact.next_invoice_number = max(contact.next_invoice_number, contact_max.get(contact.id, 0) + 1)

        for raw in expense_rows:
            repo.add(Expense(
                description=_to_text(raw.get("description")) or "",
                amount=_to_positive(raw.get("amount"), "amount"),
                category=_to_text(raw.get("category")) or "General",
                date=_to_datetime(raw.get("date"), "date"),
            ))

        stock_ins: dict[str, StockInEntry] = {}
        for raw in stock_in_rows:
            entry = StockInEntry(
                date=_to_datetime(raw.get("date"), "date"),
                reference=_to_text(raw.get("reference")),
            )
            for item in _rows(raw.get("items"), "items"):
                product = products.get(_key(item.get("productId")))
                entry.items.append(StockInItem(
                    product_id=product.id if product else None,
                    quantity=_to_positive(item.get("quantity"), "quantity"),
                ))
            repo.add(entry)
            if raw.get("id") is not None:
                stock_ins[_key(raw["id"])] = entry

        for entry, transaction_key, stock_in_key in pending_links:
            transaction = transactions.get(transaction_key)
            stock_in = stock_ins.get(stock_in_key)
            entry.transaction_id = transaction.id if transaction else None
            entry.stock_in_id = stock_in.id if stock_in else None

        info = repo.company_info()
        company = data["companyInfo"]
        info.name = _to_text(company.get("name")) or info.name
        info.address = _to_text(company.get("address"))
        info.phone = _to_text(company.get("phone"))
        info.phone2 = _to_text(company.get("phone2"))
        info.logo_url = _to_text(company.get("logoUrl"))
        info.theme = theme
        info.sales_unit_correction = _to_int(data.get("salesUnitCorrection"), "salesUnitCorrection", 0)
        info.next_invoice_number = walk_in_max + 1

    return {
        "products": len(product_rows),
        "transactions": len(transaction_rows),
        "expenses": len(expense_rows),
        "contacts": len(contact_rows),
        "stock_in_entries": len(stock_in_rows),
    }
