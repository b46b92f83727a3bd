"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are recreated for every test.
"""

import os

TEST_DATABASE_URL = "sqlite:///./test.db"

# Must be set before the application creates its engine
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from term_deposits.config import ProductConfig, RateTier
from term_deposits.main import app
from term_deposits.models import Base
from term_deposits.models.account import Account
from term_deposits.models.base import get_db
from term_deposits.models.enums import AccountStatus


engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def other_session():
    """A second, independent session for race scenarios."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """Provide a test client that uses the test session."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Factory: persist an account with the given balance and status."""
    def _make(balance="1000.00", status=AccountStatus.ACTIVE, name="Ana Pérez"):
        account = Account(
            holder_name=name,
            status=status,
            available_balance=Decimal(balance),
        )
        db_session.add(account)
        db_session.commit()
        return account
    return _make


@pytest.fixture
def flat_rate_config():
    """A one-tier table: 2.65% for [500, 5000) over 31-90 days."""
    return ProductConfig(tiers=[
        RateTier(
            principal_min=Decimal("500"),
            principal_max=Decimal("5000"),
            term_min=31,
            term_max=90,
            rate=Decimal("2.65"),
        ),
    ])
