# Overview: Pytest coverage for partial payments and debt views.

from datetime import date

import pytest

from gesti.errors import NotFoundError, ValidationError
from gesti.models import Transaction
from gesti.models.sales import METHOD_CASH, METHOD_CREDIT
from gesti.services import debt_service, payment_service
from gesti.services.contact_service import create_contact
from gesti.services.repository import TenantRepository
from gesti.services.sales_service import commit_sale


@pytest.fixture
def credit_sale(repo, snack, neighbor):
    """Credit sale of 5 x 1800 = 9000, due 2024-05-10."""
    return commit_sale(
        repo,
        [{"product_id": snack.id, "quantity": 5}],
        METHOD_CREDIT,
        contact_id=neighbor.id,
        term_days=10,
        sale_date="2024-05-01T12:00:00Z",
    )


class TestPayments:
    def test_partial_payment_and_overpayment(self, repo, credit_sale):
        payment_service.add_payment(repo, credit_sale.id, 4000)
        assert credit_sale.outstanding == 5000

        with pytest.raises(ValidationError) as exc:
            payment_service.add_payment(repo, credit_sale.id, 6000)
        assert exc.value.details["excess"] == 1000

        fresh = TenantRepository(repo.user_id).get(Transaction, credit_sale.id)
        assert [p.amount for p in fresh.payments] == [4000]

        payment_service.add_payment(repo, credit_sale.id, 5000)
        assert credit_sale.outstanding == 0

    @pytest.mark.parametrize("amount", [0, -100, "abc", None, True])
    def test_invalid_amount(self, repo, credit_sale, amount):
        with pytest.raises(ValidationError):
            payment_service.add_payment(repo, credit_sale.id, amount)

    def test_unknown_transaction(self, repo):
        with pytest.raises(NotFoundError):
            payment_service.add_payment(repo, 12345, 100)

    def test_edit_checks_against_other_payments(self, repo, credit_sale):
        payment_service.add_payment(repo, credit_sale.id, 4000)
        payment_service.add_payment(repo, credit_sale.id, 3000)

        # Raising the first payment to 6000 is allowed (6000 + 3000 = 9000)
        payment_service.update_payment(repo, credit_sale.id, 0, 6000)
        assert credit_sale.total_paid == 9000

        with pytest.raises(ValidationError):
            payment_service.update_payment(repo, credit_sale.id, 1, 3001)
        assert [p.amount for p in credit_sale.payments] == [6000, 3000]

    def test_delete_payment_by_index(self, repo, credit_sale):
        payment_service.add_payment(repo, credit_sale.id, 4000)
        payment_service.add_payment(repo, credit_sale.id, 1000)

        payment_service.delete_payment(repo, credit_sale.id, 0)
        assert [p.amount for p in credit_sale.payments] == [1000]

        with pytest.raises(NotFoundError):
            payment_service.delete_payment(repo, credit_sale.id, 5)

    def test_apply_to_contact_uses_oldest_open_debt(self, repo, soda, neighbor, credit_sale):
        newer = commit_sale(
            repo,
            [{"product_id": soda.id, "quantity": 1}],
            METHOD_CREDIT,
            contact_id=neighbor.id,
            sale_date="2024-05-03T12:00:00Z",
        )

        transaction, payment = payment_service.apply_payment_to_contact(repo, neighbor.id, 5000)
        assert transaction.id == credit_sale.id
        assert payment.amount == 5000
        assert newer.total_paid == 0

    def test_apply_to_contact_is_not_split(self, repo, neighbor, credit_sale):
        with pytest.raises(ValidationError):
            payment_service.apply_payment_to_contact(repo, neighbor.id, 9001)

    def test_apply_to_contact_without_debt(self, repo):
        contact = create_contact(repo, {"name": "Sin Deudas"})
        with pytest.raises(NotFoundError):
            payment_service.apply_payment_to_contact(repo, contact.id, 1000)


class TestDebts:
    def test_classify_due(self):
        today = date(2024, 5, 10)
        assert debt_service.classify_due(date(2024, 5, 9), today) == debt_service.STATUS_OVERDUE
        assert debt_service.classify_due(date(2024, 5, 10), today) == debt_service.STATUS_DUE_TODAY
        assert debt_service.classify_due(date(2024, 5, 11), today) == debt_service.STATUS_UPCOMING
        assert debt_service.classify_due(None, today) == debt_service.STATUS_UPCOMING

    def test_open_debts_only_credit_with_balance(self, repo, soda, neighbor, credit_sale):
        commit_sale(repo, [{"product_id": soda.id, "quantity": 1}], METHOD_CASH, contact_id=neighbor.id)
        no_term = commit_sale(
            repo, [{"product_id": soda.id, "quantity": 1}], METHOD_CREDIT, contact_id=neighbor.id
        )

        debts = debt_service.open_debts(repo, on=date(2024, 5, 10))
        assert [d.transaction.id for d in debts] == [credit_sale.id, no_term.id]
        assert debts[0].status == debt_service.STATUS_DUE_TODAY
        assert debts[1].status == debt_service.STATUS_UPCOMING

        payment_service.add_payment(repo, credit_sale.id, 9000)
        debts = debt_service.open_debts(repo, on=date(2024, 5, 10))
        assert [d.transaction.id for d in debts] == [no_term.id]

    def test_contact_balances(self, repo, neighbor, credit_sale):
        payment_service.add_payment(repo, credit_sale.id, 4000)

        balances = debt_service.contact_balances(repo, on=date(2024, 5, 11))
        assert balances == [{
            "contact_id": neighbor.id,
            "contact_name": "Vecino Tienda",
            "outstanding": 5000,
            "overdue": 5000,
            "open_count": 1,
        }]
        assert debt_service.outstanding_for_contact(repo, neighbor.id) == 5000
