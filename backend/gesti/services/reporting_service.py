# Overview: Derived aggregates for the dashboard (daily balance, best sellers).

from __future__ import annotations

from datetime import date

from ..models import Expense, Product, Transaction
from gesti.time_utils import business_date
from .debt_service import today
from .repository import TenantRepository


def daily_summary(repo: TenantRepository, on: date | None = None) -> dict:
    """
    Sales, expenses and profit for one calendar day.

    units_sold is adjusted by the tenant's sales_unit_correction, the manual
    offset the shop keeps for units sold outside the app.
    """
    on = on or today()
    sales = [t for t in repo.all(Transaction) if business_date(t.date) == on]
    expenses = [e for e in repo.all(Expense) if business_date(e.date) == on]

    total_sales = sum(t.total_amount for t in sales)
    total_expenses = sum(e.amount for e in expenses)
    units = sum(item.quantity for t in sales for item in t.items)

    return {
        "date": on.isoformat(),
        "total_sales": total_sales,
        "total_expenses": total_expenses,
        "profit": total_sales - total_expenses,
        "sales_count": len(sales),
        "units_sold": units + repo.company_info().sales_unit_correction,
    }


def top_sold_products(repo: TenantRepository, limit: int = 10) -> list[dict]:
    """Products ranked by total quantity sold across the ledger."""
    quantities: dict[int, int] = {}
    names: dict[int, str] = {}
    for t in repo.all(Transaction):
        for item in t.items:
            if item.product_id is None:
                continue
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
            names.setdefault(item.product_id, item.product_name)

    ranked = sorted(quantities.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    rows = []
    for product_id, qty in ranked:
        product = repo.get(Product, product_id)
        rows.append({
            "product_id": product_id,
            "name": product.name if product else names[product_id],
            "quantity": qty,
        })
    return rows


def inventory_value(repo: TenantRepository) -> dict:
    products = repo.all(Product)
    return {
        "products": len(products),
        "units_in_stock": sum(p.stock for p in products),
        "cost_value": sum(p.stock * p.cost for p in products),
        "retail_value": sum(p.stock * p.price for p in products),
    }
