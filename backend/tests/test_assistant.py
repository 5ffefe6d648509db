# Overview: Pytest coverage for the assistant command boundary.

"""
Assistant Boundary Tests

execute_command never raises: every failure comes back as
{"success": False, "error": ...} and leaves the data untouched.
"""

import pytest

from gesti.assistant import AddSale, execute_command, parse_command
from gesti.errors import ValidationError
from gesti.extensions import db
from gesti.models import Product, Transaction
from gesti.models.sales import METHOD_CASH, METHOD_CREDIT
from gesti.services.repository import TenantRepository
from gesti.services.sales_service import commit_sale


class CountingCommitSession:
    """Delegates to the real session and counts commits."""

    def __init__(self, session):
        self._session = session
        self.commits = 0

    def __getattr__(self, name):
        return getattr(self._session, name)

    def commit(self):
        self.commits += 1
        self._session.commit()


class TestParseCommand:
    def test_add_sale_accepts_spanish_method(self):
        command = parse_command("add_sale", {
            "items": [{"product_name": "Coca-Cola", "quantity": 2}],
            "payment_method": "Efectivo",
        })
        assert isinstance(command, AddSale)
        assert command.payment_method == METHOD_CASH
        assert command.contact_name is None

    def test_term_dropped_for_non_credit(self):
        command = parse_command("add_sale", {
            "items": [{"product_name": "Coca-Cola", "quantity": 2}],
            "payment_method": "CASH",
            "term_days": 15,
        })
        assert command.term_days is None

    @pytest.mark.parametrize("name,args", [
        ("add_sale", {"items": [], "payment_method": "CASH"}),
        ("add_sale", {"items": [{"product_name": "x", "quantity": 0}], "payment_method": "CASH"}),
        ("add_sale", {"items": [{"product_name": "x", "quantity": 1}], "payment_method": "Bitcoin"}),
        ("add_payment", {"contact_name": "Vecino", "amount": -5}),
        ("add_payment", {"amount": 500}),
        ("update_product", {"product_name": "Jumbo Jet", "fields": {"sku": "X"}}),
        ("update_product", {"product_name": "Jumbo Jet", "fields": {"stock": -1}}),
        ("update_product", {"product_name": "Jumbo Jet"}),
        ("delete_everything", {}),
        ("add_payment", "not a dict"),
    ])
    def test_invalid_commands(self, name, args):
        with pytest.raises(ValidationError):
            parse_command(name, args)


class TestExecuteCommand:
    def test_add_sale_by_names(self, repo, soda, snack, neighbor):
        result = execute_command(repo, "add_sale", {
            "items": [
                {"product_name": "coca-cola 350ml", "quantity": 2},
                {"product_name": "choco", "quantity": 1},
            ],
            "payment_method": "Efectivo",
            "contact_name": "vecino",
        })

        assert result["success"] is True
        assert result["total_amount"] == 6800
        assert result["invoice_label"] == "001"
        assert result["contact_name"] == "Vecino Tienda"
        fresh = TenantRepository(repo.user_id)
        assert fresh.get(Product, soda.id).stock == 8
        assert fresh.get(Product, snack.id).stock == 4

    def test_insufficient_stock_is_reported_not_raised(self, repo, snack):
        result = execute_command(repo, "add_sale", {
            "items": [{"product_name": "Chocoramo", "quantity": 9}],
            "payment_method": "CASH",
        })

        assert result["success"] is False
        assert result["error_type"] == "InsufficientStockError"
        assert result["details"]["shortfall"] == 4
        assert TenantRepository(repo.user_id).all(Transaction) == []

    def test_unknown_product(self, repo, soda):
        result = execute_command(repo, "add_sale", {
            "items": [{"product_name": "Pan tajado", "quantity": 1}],
            "payment_method": "CASH",
        })
        assert result["success"] is False
        assert result["error_type"] == "NotFoundError"

    def test_add_payment_to_oldest_debt(self, repo, snack, neighbor):
        sale = commit_sale(
            repo, [{"product_id": snack.id, "quantity": 5}], METHOD_CREDIT, contact_id=neighbor.id, term_days=5
        )

        result = execute_command(repo, "add_payment", {"contact_name": "Vecino Tienda", "amount": 4000})
        assert result["success"] is True
        assert result["transaction_id"] == sale.id
        assert result["transaction_outstanding"] == 5000
        assert result["contact_outstanding"] == 5000

        result = execute_command(repo, "add_payment", {"contact_name": "Vecino Tienda", "amount": 6000})
        assert result["success"] is False
        assert "exceeds" in result["error"]

    def test_update_product_fields_and_stock(self, repo, soda):
        result = execute_command(repo, "update_product", {
            "product_name": "coca",
            "fields": {"price": 3200, "stock": 25},
        })

        assert result["success"] is True
        product = TenantRepository(repo.user_id).get(Product, soda.id)
        assert product.price == 3200
        assert product.stock == 25
        assert product.stock_history[-1].reason == "adjustment"
        assert product.stock_history[-1].change == 15

    def test_update_product_commits_once(self, repo, soda):
        session = CountingCommitSession(db.session)
        counted = TenantRepository(repo.user_id, session=session)

        result = execute_command(counted, "update_product", {
            "product_name": "Coca-Cola 350ml",
            "fields": {"name": "Coca-Cola 400ml", "stock": 12},
        })

        assert result["success"] is True
        assert session.commits == 1
        product = TenantRepository(repo.user_id).get(Product, soda.id)
        assert (product.name, product.stock) == ("Coca-Cola 400ml", 12)

    def test_validation_error_payload(self, repo):
        result = execute_command(repo, "add_payment", {"contact_name": "Vecino", "amount": 0})
        assert result == {
            "success": False,
            "error": "amount must be positive",
            "error_type": "ValidationError",
        }
