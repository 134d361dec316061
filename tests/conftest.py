import itertools
import os
import tempfile
from datetime import date
from pathlib import Path

import pytest

# Point the service at a throwaway SQLite file before anything imports the engine
_DB_DIR = tempfile.mkdtemp(prefix="library_service_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'library.db'}"

from fastapi.testclient import TestClient  # noqa: E402

from library_service.database import Base, SessionLocal, engine  # noqa: E402
from library_service.dependencies import get_clock  # noqa: E402
from library_service.main import app  # noqa: E402
from library_service.schemas import BookCreate, BorrowerCreate  # noqa: E402
from library_service.services import (  # noqa: E402
    CatalogService,
    CirculationService,
    MembershipService,
)
from library_service.store import Store  # noqa: E402


class FixedClock:
    """Stand-in for the service's "today" that tests can move forward."""

    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def clock():
    return FixedClock(date(2024, 6, 1))


@pytest.fixture
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(session):
    return Store(session)


@pytest.fixture
def catalog(store):
    return CatalogService(store)


@pytest.fixture
def membership(store):
    return MembershipService(store)


@pytest.fixture
def circulation(store, catalog, clock):
    return CirculationService(store, catalog, clock=clock)


@pytest.fixture
def new_book(catalog):
    counter = itertools.count(1)

    def _create(**overrides):
        n = next(counter)
        data = {
            "title": f"Book {n}",
            "author": "Ada Writer",
            "isbn": f"978013468{n:04d}",
            "category": "Fiction",
            "total_copies": 3,
        }
        data.update(overrides)
        return catalog.create_book(BookCreate(**data))

    return _create


@pytest.fixture
def new_borrower(membership):
    counter = itertools.count(1)

    def _create(**overrides):
        n = next(counter)
        data = {
            "name": f"Reader {n}",
            "email": f"reader{n}@library.org",
            "phone": "0123456789",
        }
        data.update(overrides)
        return membership.create_borrower(BorrowerCreate(**data))

    return _create


@pytest.fixture
def client(clock):
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
