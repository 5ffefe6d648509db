# Overview: Pytest coverage for backup export/import and demo reset.

import pytest

from gesti.errors import ValidationError
from gesti.models import Contact, Expense, Product, StockInEntry, Transaction
from gesti.models.sales import METHOD_CREDIT, METHOD_TRANSFER
from gesti.services import backup_service, demo_data_service, payment_service, restock_service
from gesti.services.repository import TenantRepository
from gesti.services.sales_service import commit_sale


BROWSER_BACKUP = {
    "products": [
        {"id": "prod1", "name": "Coca-Cola 350ml", "price": 2500, "cost": 1500, "stock": 98,
         "imageUrl": "", "stockHistory": [
             {"date": "2024-05-01T10:00:00.000Z", "change": 100, "reason": "initial"},
             {"date": "2024-05-02T10:00:00.000Z", "change": -2, "reason": "sale", "transactionId": "trans1"},
         ]},
        {"id": "prod3", "name": "Chocoramo", "price": 1800, "cost": 1000, "stock": 115},
    ],
    "transactions": [
        {"id": "trans1", "invoiceNumber": 1, "items": [{"productId": "prod1", "quantity": 2, "unitPrice": 2500}],
         "totalAmount": 5000, "date": "2024-05-02T10:00:00.000Z", "paymentMethod": "Efectivo", "contactId": "cont1"},
        {"id": "trans2", "invoiceNumber": 2, "items": [{"productId": "prod3", "quantity": 5, "unitPrice": 1800}],
         "totalAmount": 9000, "date": "2024-05-03T10:00:00.000Z", "paymentMethod": "Crédito", "contactId": "cont1",
         "dueDate": "2024-05-08T10:00:00.000Z", "payments": [{"amount": 4000, "date": "2024-05-03T11:00:00.000Z"}]},
        {"id": "trans3", "invoiceNumber": 7, "items": [{"productId": "gone", "quantity": 1, "unitPrice": 500}],
         "totalAmount": 500, "date": "2024-05-03T12:00:00.000Z", "paymentMethod": "Transferencia"},
    ],
    "expenses": [
        {"id": "exp1", "description": "Arriendo local", "amount": 500000, "category": "Alquiler",
         "date": "2024-04-30T10:00:00.000Z"},
    ],
    "contacts": [{"id": "cont1", "name": "Cliente Frecuente 1", "phone": "3001234567"}],
    "companyInfo": {"name": "Mi Tiendita", "address": "Calle Falsa 123, Springfield", "phone": "300-000-0000"},
    "theme": "dark",
    "salesUnitCorrection": 3,
}


def _sale(items=None, payments=None) -> dict:
    return {
        "id": "t", "invoiceNumber": 1, "date": "2024-05-01T10:00:00.000Z", "paymentMethod": "Crédito",
        "items": items if items is not None else [{"productId": "p", "quantity": 1, "unitPrice": 1000}],
        "totalAmount": 1000, "payments": payments or [],
    }


def _document(**collections) -> dict:
    """Minimal valid backup with one product "p"; keyword arguments replace collections."""
    document = {
        "products": [{"id": "p", "name": "Agua", "price": 1000, "cost": 600, "stock": 5}],
        "transactions": [],
        "companyInfo": {"name": "Mi Tiendita"},
    }
    document.update(collections)
    return document


class TestImport:
    def test_import_browser_backup(self, repo, soda):
        counts = backup_service.import_data(repo, BROWSER_BACKUP)
        assert counts["products"] == 2
        assert counts["transactions"] == 3

        fresh = TenantRepository(repo.user_id)
        products = {p.name: p for p in fresh.all(Product)}
        assert set(products) == {"Coca-Cola 350ml", "Chocoramo"}
        assert products["Coca-Cola 350ml"].stock == 98
        assert [e.change for e in products["Coca-Cola 350ml"].stock_history] == [100, -2]
        assert [(e.change, e.reason) for e in products["Chocoramo"].stock_history] == [(115, "initial")]

        contact = fresh.all(Contact)[0]
        assert contact.next_invoice_number == 3

        sales = {t.invoice_number: t for t in fresh.all(Transaction)}
        credit = sales[2]
        assert credit.payment_method == METHOD_CREDIT
        assert credit.contact_id == contact.id
        assert credit.outstanding == 5000
        assert credit.due_date.isoformat() == "2024-05-08"

        orphan = sales[7]
        assert orphan.payment_method == METHOD_TRANSFER
        assert orphan.items[0].product_id is None
        assert orphan.contact_id is None

        info = fresh.company_info()
        assert info.theme == "dark"
        assert info.sales_unit_correction == 3
        assert info.next_invoice_number == 8
        assert len(fresh.all(Expense)) == 1

    @pytest.mark.parametrize("document", [
        None,
        [],
        {"products": [], "transactions": []},
        {"products": [], "companyInfo": {}},
    ])
    def test_missing_required_keys(self, repo, soda, document):
        with pytest.raises(ValidationError):
            backup_service.import_data(repo, document)
        assert TenantRepository(repo.user_id).get(Product, soda.id) is not None

    def test_overpaid_transaction_rejects_whole_import(self, repo, soda):
        document = {
            "products": [],
            "transactions": [{"id": "t", "items": [], "totalAmount": 100, "date": "2024-05-01",
                              "paymentMethod": "CASH", "payments": [{"amount": 200, "date": "2024-05-01"}]}],
            "companyInfo": {},
        }
        with pytest.raises(ValidationError):
            backup_service.import_data(repo, document)

        fresh = TenantRepository(repo.user_id)
        assert [p.name for p in fresh.all(Product)] == ["Coca-Cola 350ml"]
        assert fresh.get(Product, soda.id).stock == 10

    @pytest.mark.parametrize("patch", [
        {"transactions": [_sale(payments=[{"amount": -5000, "date": "2024-05-01"}])]},
        {"transactions": [_sale(payments=[{"amount": 0, "date": "2024-05-01"}])]},
        {"transactions": [_sale(items=[{"productId": "p", "quantity": 1, "unitPrice": -500}])]},
        {"transactions": [_sale(items=[{"productId": "p", "quantity": 0, "unitPrice": 500}])]},
        {"products": [{"id": "p", "name": "Agua", "price": -1, "cost": 0, "stock": 1}]},
        {"products": [{"id": "p", "name": "Agua", "price": 1, "cost": -1, "stock": 1}]},
        {"stockInEntries": [{"id": "s", "date": "2024-05-01", "items": [{"productId": "p", "quantity": 0}]}]},
        {"stockInEntries": [{"id": "s", "date": "2024-05-01", "items": [{"productId": "p", "quantity": -3}]}]},
    ])
    def test_out_of_range_amounts_reject_whole_import(self, repo, soda, patch):
        with pytest.raises(ValidationError):
            backup_service.import_data(repo, _document(**patch))

        fresh = TenantRepository(repo.user_id)
        assert [p.name for p in fresh.all(Product)] == ["Coca-Cola 350ml"]
        assert fresh.all(Transaction) == []

    @pytest.mark.parametrize("patch", [
        {"products": ["oops"]},
        {"transactions": [5]},
        {"contacts": "cont1"},
        {"transactions": [_sale(items=["p"])]},
        {"transactions": [_sale(payments=[1000])]},
        {"products": [{"id": "p", "name": "Agua", "price": 1, "stock": 1, "stockHistory": ["initial"]}]},
        {"stockInEntries": [{"id": "s", "date": "2024-05-01", "items": [None]}]},
    ])
    def test_rows_that_are_not_objects(self, repo, soda, patch):
        with pytest.raises(ValidationError):
            backup_service.import_data(repo, _document(**patch))
        assert TenantRepository(repo.user_id).get(Product, soda.id) is not None


class TestExport:
    def test_export_shape(self, repo, soda, neighbor):
        sale = commit_sale(
            repo, [{"product_id": soda.id, "quantity": 2}], METHOD_CREDIT, contact_id=neighbor.id, term_days=3
        )
        payment_service.add_payment(repo, sale.id, 1000)
        restock_service.add_stock_in(repo, [{"product_id": soda.id, "quantity": 4}])

        data = backup_service.export_data(repo)

        assert set(data) == {
            "products", "transactions", "expenses", "contacts", "companyInfo",
            "stockInEntries", "theme", "salesUnitCorrection",
        }
        exported_sale = data["transactions"][0]
        assert exported_sale["contactId"] == str(neighbor.id)
        assert exported_sale["payments"][0]["amount"] == 1000
        assert "dueDate" in exported_sale
        assert [h["reason"] for h in data["products"][0]["stockHistory"]] == ["initial", "sale", "restock"]

    def test_export_can_be_imported_by_another_account(self, repo, repo_b, soda, neighbor):
        commit_sale(repo, [{"product_id": soda.id, "quantity": 2}], METHOD_CREDIT, contact_id=neighbor.id)

        backup_service.import_data(repo_b, backup_service.export_data(repo))

        fresh_b = TenantRepository(repo_b.user_id)
        assert fresh_b.all(Product)[0].stock == 8
        assert fresh_b.all(Transaction)[0].contact.name == "Vecino Tienda"
        # The source account is untouched
        assert len(TenantRepository(repo.user_id).all(Transaction)) == 1

    def test_round_trip_keeps_history_links(self, repo, repo_b, soda, neighbor):
        commit_sale(repo, [{"product_id": soda.id, "quantity": 2}], METHOD_CREDIT, contact_id=neighbor.id)
        restock_service.add_stock_in(repo, [{"product_id": soda.id, "quantity": 4}], reference="Factura 88")

        backup_service.import_data(repo_b, backup_service.export_data(repo))

        fresh_b = TenantRepository(repo_b.user_id)
        sale = fresh_b.all(Transaction)[0]
        restock = fresh_b.all(StockInEntry)[0]
        history = {e.reason: e for e in fresh_b.all(Product)[0].stock_history}
        assert history["sale"].transaction_id == sale.id
        assert history["sale"].stock_in_id is None
        assert history["restock"].stock_in_id == restock.id
        assert history["restock"].transaction_id is None
        assert history["initial"].transaction_id is None

    def test_history_link_to_missing_sale_is_dropped(self, repo):
        document = _document(products=[{
            "id": "p", "name": "Agua", "price": 1000, "stock": 3,
            "stockHistory": [
                {"date": "2024-05-01", "change": 5, "reason": "initial"},
                {"date": "2024-05-02", "change": -2, "reason": "sale", "transactionId": "deleted"},
            ],
        }])

        backup_service.import_data(repo, document)

        history = TenantRepository(repo.user_id).all(Product)[0].stock_history
        assert [(e.change, e.transaction_id) for e in history] == [(5, None), (-2, None)]


def test_reset_to_demo(repo, soda):
    counts = demo_data_service.reset_to_demo(repo)
    assert counts == {"products": 5, "contacts": 2, "transactions": 2, "expenses": 2}

    fresh = TenantRepository(repo.user_id)
    products = {p.name: p for p in fresh.all(Product)}
    assert "Coca-Cola 350ml" in products and products["Coca-Cola 350ml"].stock == 98
    assert products["Chocoramo"].stock == 115
    assert fresh.all(StockInEntry) == []

    credit = [t for t in fresh.all(Transaction) if t.payment_method == METHOD_CREDIT][0]
    assert credit.total_amount == 9000
    assert credit.outstanding == 5000
    assert fresh.company_info().name == "Mi Tiendita"
