"""
Shared fixtures: in-memory database and API client.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test database session."""
    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def driver(client):
    response = client.post("/api/users", json={"name": "Ajay", "phone": "9876543210", "role": "driver"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def fleet_owner(client):
    response = client.post("/api/users", json={"name": "Sharma Transport", "role": "fleet_owner"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def own_vehicle(client):
    response = client.post(
        "/api/vehicles",
        json={"registration_number": "HR57A0956", "ownership_type": "self", "current_km": "1000"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def fleet_vehicle(client, fleet_owner):
    response = client.post(
        "/api/vehicles",
        json={
            "registration_number": "MH04GH1234",
            "ownership_type": "fleet_owner",
            "owner_id": fleet_owner["id"],
        }
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def book_trip(client):
    """Factory booking a trip through the API."""
    def _book(vehicle, driver=None, **extra):
        payload = {
            "scheduled_date": "2025-09-01",
            "vehicle_id": vehicle["id"],
            "driver_id": driver["id"] if driver else None,
            "loads": [
                {
                    "client_name": "Hindustan Traders",
                    "description": "Cartons",
                    "origin_city": "Bhiwandi",
                    "destination_city": "Pune",
                    "total_rate": "18000",
                }
            ],
        }
        payload.update(extra)
        response = client.post("/api/trips", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _book


@pytest.fixture
def add_entry(client):
    """Factory posting an advance or expense to a trip ledger."""
    def _add(trip, ledger, kind, amount, **extra):
        payload = {"amount": str(amount), **extra}
        response = client.post(f"/api/trips/{trip['id']}/ledgers/{ledger}/{kind}", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _add
