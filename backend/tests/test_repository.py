# Overview: Pytest coverage for the tenant repository's cache and failure handling.

import pytest
from sqlalchemy.exc import OperationalError

from gesti.errors import NotFoundError, PersistenceError
from gesti.extensions import db
from gesti.models import Product, Transaction
from gesti.models.sales import METHOD_CASH
from gesti.services import payment_service
from gesti.services.products_service import create_product
from gesti.services.repository import TenantRepository
from gesti.services.sales_service import commit_sale


class FailingCommitSession:
    """Delegates to the real session but fails every commit."""

    def __init__(self, session):
        self._session = session

    def __getattr__(self, name):
        return getattr(self._session, name)

    def commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))


def test_reads_are_tenant_scoped(repo, repo_b, soda):
    create_product(repo_b, {"name": "Otro", "price": 100, "stock": 1})

    assert [p.name for p in repo.all(Product)] == ["Coca-Cola 350ml"]
    assert [p.name for p in repo_b.all(Product)] == ["Otro"]
    with pytest.raises(NotFoundError):
        repo_b.require(Product, soda.id, "Product")


def test_collection_is_cached_until_invalidated(repo, soda):
    assert len(repo.all(Product)) == 1

    db.session.add(Product(user_id=repo.user_id, name="Direct insert", price=1, cost=0, stock=0))
    db.session.commit()
    assert len(repo.all(Product)) == 1

    repo.invalidate()
    assert len(repo.all(Product)) == 2


def test_failed_commit_applies_nothing(repo, soda):
    failing = TenantRepository(repo.user_id, session=FailingCommitSession(db.session))

    with pytest.raises(PersistenceError):
        commit_sale(failing, [{"product_id": soda.id, "quantity": 3}], METHOD_CASH)

    fresh = TenantRepository(repo.user_id)
    assert fresh.get(Product, soda.id).stock == 10
    assert len(fresh.get(Product, soda.id).stock_history) == 1
    assert fresh.all(Transaction) == []


def test_failed_payment_commit_is_not_recorded(repo, soda):
    sale = commit_sale(repo, [{"product_id": soda.id, "quantity": 1}], METHOD_CASH)
    failing = TenantRepository(repo.user_id, session=FailingCommitSession(db.session))

    with pytest.raises(PersistenceError):
        payment_service.add_payment(failing, sale.id, 1000)

    assert TenantRepository(repo.user_id).get(Transaction, sale.id).payments == []
