"""
Tests for user and vehicle endpoints.
"""


def test_create_and_list_users_by_role(client, driver, fleet_owner):
    """Test role filtering."""
    response = client.get("/api/users", params={"role": "driver"})
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [driver["id"]]


def test_duplicate_email(client):
    """Test email uniqueness."""
    payload = {"name": "Ravi", "email": "ravi@example.com", "role": "driver"}
    assert client.post("/api/users", json=payload).status_code == 201
    assert client.post("/api/users", json=payload).status_code == 400


def test_update_user(client, driver):
    """Test updating contact details."""
    response = client.patch(f"/api/users/{driver['id']}", json={"phone": "9000000000"})
    assert response.status_code == 200
    assert response.json()["phone"] == "9000000000"
    assert response.json()["name"] == driver["name"]


def test_get_missing_user(client):
    """Test unknown user id."""
    assert client.get("/api/users/999").status_code == 404


def test_fleet_vehicle_needs_fleet_owner(client, driver):
    """Test fleet vehicles must point at a fleet owner."""
    response = client.post(
        "/api/vehicles",
        json={"registration_number": "GJ01AB0001", "ownership_type": "fleet_owner"}
    )
    assert response.status_code == 400

    response = client.post(
        "/api/vehicles",
        json={"registration_number": "GJ01AB0001", "ownership_type": "fleet_owner", "owner_id": driver["id"]}
    )
    assert response.status_code == 400


def test_duplicate_registration(client, own_vehicle):
    """Test registration numbers are unique."""
    response = client.post("/api/vehicles", json={"registration_number": own_vehicle["registration_number"]})
    assert response.status_code == 400


def test_health(client):
    """Test health endpoint."""
    assert client.get("/health").json() == {"status": "healthy"}
