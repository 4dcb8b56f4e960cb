"""
Pytest fixtures shared by the service, repository and API tests

Every test gets a fresh in-memory SQLite database (foreign keys enabled)
with the full schema, plus factories to seed it.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orders_api.core.database import build_engine, get_db, init_db
from orders_api.main import app
from orders_api.models import Customer, Product, Supplier


class FrozenClock:
    """Callable clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta):
        self.now = self.now + timedelta(**delta)


class Factory:
    """Seeds catalog records and commits each one"""

    def __init__(self, session):
        self.session = session

    def _save(self, record):
        self.session.add(record)
        self.session.commit()
        return record

    def customer(self, first_name="Maria", last_name="Anders", city="Berlin",
                 country="Germany", phone="030-0074321"):
        return self._save(Customer(
            first_name=first_name, last_name=last_name, city=city, country=country, phone=phone
        ))

    def supplier(self, company_name="Exotic Liquids", contact_name="Charlotte Cooper",
                 city="London", country="UK", phone="(171) 555-2222", fax=None):
        return self._save(Supplier(
            company_name=company_name, contact_name=contact_name, city=city,
            country=country, phone=phone, fax=fax,
        ))

    def product(self, supplier, product_name="Chai", unit_price="18.00",
                package="10 boxes x 20 bags", is_discontinued=False):
        return self._save(Product(
            supplier_id=supplier.id, product_name=product_name, unit_price=Decimal(unit_price),
            package=package, is_discontinued=is_discontinued,
        ))


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of one test"""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session used by service and repository tests"""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def clock():
    """Clock frozen at 2025-03-10 12:00 UTC"""
    return FrozenClock(datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(engine):
    """
    TestClient whose get_db dependency uses the test engine

    Not entered as a context manager, so the startup hook (table creation
    against the configured database) does not run.
    """
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api_factory(engine):
    """
    Factory for API tests

    Uses its own session and never reloads records after commit, so it holds
    no open transaction while requests run on the shared connection.
    """
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield Factory(session)
    session.close()
