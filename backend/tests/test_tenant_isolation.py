# Overview: Pytest coverage proving one account can never read or write another's data.

import pytest

from gesti.errors import NotFoundError
from gesti.models import Product, Transaction
from gesti.models.sales import METHOD_CASH, METHOD_CREDIT
from gesti.services import payment_service
from gesti.services.inventory_service import adjust_stock
from gesti.services.products_service import create_product, delete_product
from gesti.services.sales_service import commit_sale, delete_sale


def test_cannot_sell_another_accounts_product(repo_b, soda):
    with pytest.raises(NotFoundError):
        commit_sale(repo_b, [{"product_id": soda.id, "quantity": 1}], METHOD_CASH)

    assert soda.stock == 10


def test_cannot_touch_another_accounts_stock(repo_b, soda):
    with pytest.raises(NotFoundError):
        adjust_stock(repo_b, soda.id, 0)
    with pytest.raises(NotFoundError):
        delete_product(repo_b, soda.id)


def test_cannot_pay_or_delete_another_accounts_sale(repo, repo_b, soda, neighbor):
    sale = commit_sale(
        repo, [{"product_id": soda.id, "quantity": 2}], METHOD_CREDIT, contact_id=neighbor.id, term_days=7,
    )

    with pytest.raises(NotFoundError):
        payment_service.add_payment(repo_b, sale.id, 1000)
    with pytest.raises(NotFoundError):
        payment_service.apply_payment_to_contact(repo_b, neighbor.id, 1000)
    with pytest.raises(NotFoundError):
        delete_sale(repo_b, sale.id)

    assert repo.get(Transaction, sale.id).payments == []
    assert repo.get(Product, soda.id).stock == 8


def test_invoice_sequences_are_per_account(repo, repo_b, soda):
    other = create_product(repo_b, {"name": "Agua", "price": 1000, "stock": 5})
    first_a = commit_sale(repo, [{"product_id": soda.id, "quantity": 1}], METHOD_CASH)
    first_b = commit_sale(repo_b, [{"product_id": other.id, "quantity": 1}], METHOD_CASH)

    assert first_a.invoice_number == 1
    assert first_b.invoice_number == 1
