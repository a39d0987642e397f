import os
import sys

import pytest
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fitquest import create_app, db
from fitquest.storage import MemoryStore, get_store
from werkzeug.security import generate_password_hash

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SQLALCHEMY_ENGINE_OPTIONS": {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    },
    "JWT_SECRET_KEY": "test-jwt-secret-key-that-is-long-enough",
    "JWT_COOKIE_CSRF_PROTECT": False,
    "STRIPE_SECRET_KEY": "sk_test_dummy",
}


class FakePayments:
    """Records collection requests instead of calling Stripe."""

    def __init__(self, client_secret="pi_test_secret_123", error=None):
        self.client_secret = client_secret
        self.error = error
        self.calls = []

    def create_collection_session(self, metadata):
        self.calls.append(dict(metadata))
        if self.error:
            raise self.error
        return self.client_secret


@pytest.fixture
def app():
    app = create_app({**TEST_CONFIG, "STORAGE_BACKEND": "memory"})
    with app.app_context():
        yield app


@pytest.fixture
def sql_app():
    app = create_app({**TEST_CONFIG, "STORAGE_BACKEND": "sql"})
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def sql_file_app(tmp_path):
    """SQL backend on a file database so each thread gets its own connection."""
    config = {
        **TEST_CONFIG,
        "STORAGE_BACKEND": "sql",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'fitquest.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {
            "connect_args": {"check_same_thread": False, "timeout": 30},
        },
    }
    app = create_app(config)
    with app.app_context():
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return get_store()


@pytest.fixture
def sql_store(sql_app):
    return get_store()


@pytest.fixture
def mem_store():
    """Bare store with no app, for pure service tests."""
    return MemoryStore()


@pytest.fixture
def payments():
    return FakePayments()


def make_user(store, username="alice", points=0):
    user = store.create_user(
        email=f"{username}@example.com",
        username=username,
        password_hash=generate_password_hash("password123"),
    )
    if points:
        user = store.adjust_points(user.id, points)
    return user


def register(client, username="alice", password="password123", **extra):
    body = {
        "email": f"{username}@example.com",
        "username": username,
        "password": password,
    }
    body.update(extra)
    resp = client.post("/api/auth/register", json=body)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["user"]
