"""
Pytest configuration and fixtures for the fleet ledger API.

The environment is set before the application is imported so settings,
the engine and the logger pick up the test values.
"""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256-signing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleet_ledger import models  # noqa: F401
from fleet_ledger.core.database import Base
from fleet_ledger.core.dependencies import get_db
from fleet_ledger.main import app

API = "/api/v1"

TEST_USERS = {
    'admin': {'username': 'admin', 'password': 'admin123', 'name': 'Administrator'},
    'clerk': {'username': 'clerk', 'password': 'clerk123', 'name': 'Desk Clerk'},
}

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def tables():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Session for service-level tests"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """API client with get_db pointed at the in-memory database"""
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def login(client, username, password):
    response = client.post(f"{API}/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Register the first (admin) user and return bearer headers"""
    admin = TEST_USERS['admin']
    response = client.post(f"{API}/auth/register", json=admin)
    assert response.status_code == 201, response.text
    return login(client, admin['username'], admin['password'])


@pytest.fixture
def make_branch(client, auth_headers):
    def _make(branch_name="Main Branch", **extra):
        response = client.post(
            f"{API}/branches",
            json={"branch_name": branch_name, **extra},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def make_vehicle(client, auth_headers):
    counter = {"n": 0}

    def _make(**extra):
        counter["n"] += 1
        payload = {
            "vehicle_number": f"abc-{1000 + counter['n']}",
            "driver_name": "Ahmed",
            "co_passenger_name": "Bilal",
        }
        payload.update(extra)
        response = client.post(f"{API}/vehicles", json=payload, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def make_ledger(client, auth_headers, make_vehicle):
    def _make(opening_balance="1000", vehicle=None, date="2024-05-01"):
        vehicle = vehicle or make_vehicle()
        response = client.post(
            f"{API}/purchase-sales",
            json={"date": date, "vehicle_id": vehicle["id"], "opening_balance": opening_balance},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def add_transaction(client, auth_headers):
    def _add(ledger_id, **payload):
        payload.setdefault("date", "2024-05-02")
        return client.post(
            f"{API}/purchase-sales/{ledger_id}/transactions",
            json=payload,
            headers=auth_headers,
        )
    return _add


def post_expense(client, headers, **payload):
    body = {'title': 'Diesel', 'amount': '100', 'category': 'Fuel'}
    body.update(payload)
    return client.post(f"{API}/expenses", json=body, headers=headers)
