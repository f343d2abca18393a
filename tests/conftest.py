"""Pytest fixtures for testing"""

import os

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)

import pytest
from datetime import date
from decimal import Decimal
from itertools import count
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finance_tracker.api.main import create_app
from finance_tracker.api.dependencies import get_today
from finance_tracker.infrastructure.database.models import Base, UserAccount
from finance_tracker.infrastructure.database.session import get_db
from finance_tracker.domain.models import CreditCard, Transaction


engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_TODAY = date(2024, 6, 15)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Extra sessions on the test database, for cross-session scenarios"""
    return TestingSessionLocal


@pytest.fixture
def today() -> date:
    return FIXED_TODAY


@pytest.fixture
def client(db: Session, today: date) -> TestClient:
    """Create FastAPI test client with test database and a pinned 'today'"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: today
    return TestClient(app)


@pytest.fixture
def owners(db: Session) -> dict:
    """One basic and one premium owner, plus one still onboarding"""
    accounts = {
        "basic": UserAccount(auth_user_id="auth-basic", name="Ana", plan_type="basic", completed_onboarding=True),
        "premium": UserAccount(auth_user_id="auth-premium", name="Bruno", plan_type="premium", completed_onboarding=True),
        "pending": UserAccount(auth_user_id="auth-pending", name="Caio", plan_type="basic", completed_onboarding=False),
    }
    db.add_all(accounts.values())
    db.commit()
    return accounts


@pytest.fixture
def basic_headers(owners: dict) -> dict:
    return {"X-User-Id": "auth-basic"}


@pytest.fixture
def premium_headers(owners: dict) -> dict:
    return {"X-User-Id": "auth-premium"}


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for domain transactions with sensible defaults"""
    ids = count(1)

    def factory(**overrides) -> Transaction:
        fields = {
            "id": next(ids),
            "owner_id": 1,
            "amount": Decimal("100.00"),
            "type": "despesa",
            "category": "Mercado",
            "tx_date": FIXED_TODAY,
            "description": "Compra",
        }
        fields.update(overrides)
        if "amount" in overrides:
            fields["amount"] = Decimal(str(overrides["amount"]))
        return Transaction(**fields)

    return factory


@pytest.fixture
def card() -> CreditCard:
    """Card closing on the 25th, due on the 10th"""
    return CreditCard(id=1, owner_id=1, bank_name="Nubank", due_date=10, close_date=25)
