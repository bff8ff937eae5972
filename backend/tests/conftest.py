"""
Pytest fixtures for the storefront backend tests.

Provides an in-memory database, the Flask test client, and shopper/admin
accounts with ready-made Authorization headers.
"""

import pytest

from treasures import create_app
from treasures.config import Config
from treasures.extensions import db
from treasures.models import Watch, CartLine
from treasures.services.auth_service import create_user


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_ROUNDS = 4
    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "no-reply@timestreasures.test"
    RECEIPTS_ENABLED = False
    FRONTEND_URL = "https://shop.timestreasures.test"


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
def file_app(tmp_path):
    """Application bound to a file-backed SQLite database, for multi-threaded tests."""
    config = type("FileTestConfig", (TestConfig,), {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'treasures.sqlite3'}",
    })
    app = create_app(config)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


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


@pytest.fixture(scope='function')
def shopper(db_session):
    """Regular user account (password: secret1)."""
    return create_user(name="Dana", email="dana@example.com", password="secret1")


@pytest.fixture(scope='function')
def admin(db_session):
    """Admin account (password: secret1)."""
    return create_user(name="Avi", email="avi@example.com", password="secret1", role="admin")


@pytest.fixture(scope='function')
def make_watch(db_session):
    """Factory for catalog watches; keyword overrides win over the defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "name": f"Watch {counter['n']}",
            "price_cents": 10_000,
            "image": f"https://img.example.com/{counter['n']}.jpg",
            "category": "men-watches",
            "description": "A test watch.",
            "inventory": 10,
        }
        data.update(overrides)
        watch = Watch(**data)
        db_session.add(watch)
        db_session.commit()
        return watch

    return _make


@pytest.fixture(scope='function')
def fill_cart(db_session):
    """Put (watch, quantity) pairs straight into a user's cart."""
    def _fill(user, *items):
        for watch, quantity in items:
            db_session.add(CartLine(user_id=user.id, watch_id=watch.id, quantity=quantity))
        db_session.commit()

    return _fill


@pytest.fixture(scope='function')
def shopper_headers(client, shopper):
    return auth_headers(get_auth_token(client, "dana@example.com", "secret1"))


@pytest.fixture(scope='function')
def admin_headers(client, admin):
    return auth_headers(get_auth_token(client, "avi@example.com", "secret1"))


def get_auth_token(client, email: str, password: str) -> str:
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
