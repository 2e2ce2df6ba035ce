# Set test environment before any application or db imports.
import os

os.environ["TESTING"] = "true"
os.environ["TESTING_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from catalog_core.geo_ranker import GeoPoint
from db import SessionLocal, get_db
from main import app
from models import Base
from models.image import Image  # noqa: F401 - register with Base
from models.location import Location  # noqa: F401
from models.review import Review  # noqa: F401
from repositories.location_repository import create_location


def _get_engine():
    """Engine used by the app (in-memory when TESTING=true)."""
    return SessionLocal.kw["bind"]


@pytest.fixture(scope="session")
def engine():
    """One in-memory engine per test run; create tables once."""
    eng = _get_engine()
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture
def db_session(engine):
    """Function-scoped session; each test runs in a transaction that is rolled back."""
    connection = engine.connect()
    trans = connection.begin()
    session = Session(bind=connection, join_transaction_mode="create_savepoint")
    try:
        yield session
    finally:
        session.close()
        if trans.is_active:
            trans.rollback()
        connection.close()


def _override_get_db(session):
    """Return a generator that yields the given session (for dependency override)."""
    def override():
        yield session
    return override


@pytest.fixture
def client(db_session):
    """API test client; overrides get_db to use the test db_session, cleared on teardown."""
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_location(db_session):
    """Factory: create a location through the repository in the test session."""
    def _make(name="Test Location", lng=-3.688333, lat=40.453056, **kwargs):
        return create_location(db_session, name=name, position=GeoPoint(lng=lng, lat=lat), **kwargs)
    return _make
