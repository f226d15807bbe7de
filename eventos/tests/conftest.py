import os

import pytest
from argon2 import PasswordHasher
from sqlalchemy import func, select

from eventos.database.db_connection import Database
from eventos.gateway.server import create_app

# Ensure token secrets are set for tests
os.environ["ACCESS_TOKEN_SECRET"] = "test_access_secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test_refresh_secret"

# Cheap Argon2 parameters keep the suite fast
FAST_HASHER = PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)

TEST_CONFIG = {
    "TESTING": True,
    "DATABASE_URL": "sqlite://",
    "ACCESS_TOKEN_SECRET": "test_access_secret",
    "REFRESH_TOKEN_SECRET": "test_refresh_secret",
    "PASSWORD_HASHER": FAST_HASHER,
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    yield app
    app.extensions["eventos"]["db"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["eventos"]


@pytest.fixture
def database():
    """A standalone in-memory database for repository tests."""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def count_rows():
    """Return a helper that counts rows of a model in a Database."""
    def _count(db, model):
        with db.session() as session:
            return session.scalar(select(func.count()).select_from(model))
    return _count


@pytest.fixture
def attendee_payload():
    return {
        "email": "a@x.com",
        "userName": "abc",
        "password": "secret1",
        "role": "attendee",
        "name": "A",
    }


@pytest.fixture
def organizer_payload():
    return {
        "email": "org@x.com",
        "userName": "org",
        "password": "secret12",
        "role": "organizer",
        "name": "Org Person",
        "organization": "Campus Events",
    }
