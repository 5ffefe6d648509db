"""
Pytest fixtures for Gesti backend tests.

Provides test database setup, tenant fixtures, repositories, and test client.
"""

import pytest
from gesti import create_app
from gesti.config import TestConfig
from gesti.extensions import db
from gesti.models import User
from gesti.services.auth_service import hash_password
from gesti.services.products_service import create_product
from gesti.services.contact_service import create_contact
from gesti.services.repository import TenantRepository


PASSWORD = "Password123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _make_user(db_session, name: str, email: str) -> User:
    user = User(name=name, email=email, password_hash=hash_password(PASSWORD))
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def user_a(db_session):
    """Tenant A."""
    return _make_user(db_session, "Tienda A", "a@tienda.test")


@pytest.fixture(scope='function')
def user_b(db_session):
    """Tenant B."""
    return _make_user(db_session, "Tienda B", "b@tienda.test")


@pytest.fixture(scope='function')
def repo(db_session, user_a):
    return TenantRepository(user_a.id)


@pytest.fixture(scope='function')
def repo_b(db_session, user_b):
    return TenantRepository(user_b.id)


@pytest.fixture(scope='function')
def soda(repo):
    """Product with price 2500 and 10 units in stock."""
    return create_product(repo, {"name": "Coca-Cola 350ml", "price": 2500, "cost": 1500, "stock": 10})


@pytest.fixture(scope='function')
def snack(repo):
    """Product with price 1800 and 5 units in stock."""
    return create_product(repo, {"name": "Chocoramo", "price": 1800, "cost": 1000, "stock": 5})


@pytest.fixture(scope='function')
def neighbor(repo):
    return create_contact(repo, {"name": "Vecino Tienda", "phone": "3109876543"})


def get_auth_token(client, email: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def headers_a(client, user_a):
    return auth_headers(get_auth_token(client, user_a.email))


@pytest.fixture(scope='function')
def headers_b(client, user_b):
    return auth_headers(get_auth_token(client, user_b.email))
