# Overview: Demo dataset used by reset-to-demo and the seed-demo CLI command.

"""
Demo Data Service

Replaces the tenant's data with a small corner-shop dataset: five products,
two contacts, a paid cash sale from yesterday, a partly paid credit sale
from today and two expenses. Sales go through the same stock bookkeeping
as real ones, so the history of every product reconciles with its stock.
"""

from __future__ import annotations

from datetime import timedelta

from ..models import Contact, Expense, Payment, Product, Transaction, TransactionItem
from ..models.catalog import REASON_INITIAL, REASON_SALE
from ..models.sales import METHOD_CASH, METHOD_CREDIT
from ..models.settings import THEME_LIGHT
from gesti.time_utils import utcnow
from .backup_service import clear_tenant_data
from .inventory_service import apply_stock_change
from .repository import TenantRepository
from .sales_service import compute_due_date


DEMO_PRODUCTS = [
    # name, price, cost, stock
    ("Coca-Cola 350ml", 2500, 1500, 100),
    ("Papas Margarita Pollo", 2000, 1200, 80),
    ("Chocoramo", 1800, 1000, 120),
    ("Jumbo Jet", 3000, 1800, 50),
    ("Agua Cristal 600ml", 1500, 800, 200),
]

DEMO_CONTACTS = [
    ("Cliente Frecuente 1", "3001234567"),
    ("Vecino Tienda", "3109876543"),
]

DEMO_EXPENSES = [
    # description, amount, category, days ago
    ("Arriendo local", 500000, "Alquiler", 2),
    ("Recibo de la luz", 80000, "Servicios", 1),
]

DEMO_COMPANY = {
    "name": "Mi Tiendita",
    "address": "Calle Falsa 123, Springfield",
    "phone": "300-000-0000",
}


def _record_sale(repo, *, contact, lines, method, occurred, term_days=None) -> Transaction:
    transaction = Transaction(
        invoice_number=contact.next_invoice_number,
        date=occurred,
        payment_method=method,
        contact_id=contact.id,
        due_date=compute_due_date(occurred, method, term_days),
    )
    contact.next_invoice_number += 1
    transaction.items = [
        TransactionItem(product_id=p.id, product_name=p.name, quantity=qty, unit_price=p.price)
        for p, qty in lines
    ]
    transaction.total_amount = sum(item.subtotal for item in transaction.items)
    repo.add(transaction)
    for product, qty in lines:
        apply_stock_change(product, -qty, REASON_SALE, occurred_at=occurred, transaction_id=transaction.id)
    return transaction


def reset_to_demo(repo: TenantRepository) -> dict:
    """Wipe the tenant and load the demo dataset as one unit."""
    now = utcnow()

    with repo.atomic():
        clear_tenant_data(repo)

        products = []
        for name, price, cost, stock in DEMO_PRODUCTS:
            product = Product(name=name, price=price, cost=cost, stock=0)
            repo.add(product)
            apply_stock_change(product, stock, REASON_INITIAL, occurred_at=now)
            products.append(product)

        contacts = []
        for name, phone in DEMO_CONTACTS:
            contact = Contact(name=name, phone=phone, next_invoice_number=1)
            repo.add(contact)
            contacts.append(contact)

        _record_sale(
            repo,
            contact=contacts[0],
            lines=[(products[0], 2), (products[1], 1)],
            method=METHOD_CASH,
            occurred=now - timedelta(days=1),
        )
        credit = _record_sale(
            repo,
            contact=contacts[1],
            lines=[(products[2], 5)],
            method=METHOD_CREDIT,
            occurred=now,
            term_days=6,
        )
        credit.payments.append(Payment(amount=4000, paid_at=now))

        for description, amount, category, days_ago in DEMO_EXPENSES:
            repo.add(Expense(
                description=description,
                amount=amount,
                category=category,
                date=now - timedelta(days=days_ago),
            ))

        info = repo.company_info()
        info.name = DEMO_COMPANY["name"]
        info.address = DEMO_COMPANY["address"]
        info.phone = DEMO_COMPANY["phone"]
        info.phone2 = None
        info.logo_url = None
        info.theme = THEME_LIGHT
        info.sales_unit_correction = 0
        info.next_invoice_number = 1

    return {
        "products": len(products),
        "contacts": len(contacts),
        "transactions": 2,
        "expenses": len(DEMO_EXPENSES),
    }
