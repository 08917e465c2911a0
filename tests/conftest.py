"""Pytest fixtures for testing"""

import os

# Point settings at SQLite before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_servicing.api.main import create_app
from loan_servicing.api.dependencies import get_today
from loan_servicing.infrastructure.database.models import Base
from loan_servicing.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed business date so overdue and urgency checks are deterministic
TODAY = date(2025, 3, 20)


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
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and fixed business date"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def borrower(client: TestClient) -> dict:
    """Registered client of manager-1"""
    response = client.post(
        "/v1/clients",
        json={
            "manager_id": "manager-1",
            "full_name": "Ana Gómez",
            "dni": "30123456",
            "phone": "+54 11 5555-0000",
            "email": "ana@example.com",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def reference_loan(client: TestClient, borrower: dict) -> dict:
    """100000 at 34% in 5 monthly installments starting 2025-01-15"""
    response = client.post(
        "/v1/loans",
        json={
            "client_id": borrower["client_id"],
            "principal": 100000,
            "interest_rate_percent": 34,
            "installment_count": 5,
            "start_date": "2025-01-15",
        },
    )
    assert response.status_code == 201
    return response.json()
