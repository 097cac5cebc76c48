"""
Tests for trip and member endpoints.
"""


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_trip_defaults(client):
    """Test trip creation with default currency and cleaned members."""
    response = client.post(
        "/api/trips",
        json={"title": "Kyoto", "members": [" Alice", "Bob", "Alice", ""]}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["base_currency"] == "USD"
    assert data["members"] == ["Alice", "Bob"]


def test_create_trip_rejects_bad_input(client):
    assert client.post("/api/trips", json={"title": ""}).status_code == 422
    assert client.post("/api/trips", json={"title": "X", "base_currency": "EURO"}).status_code == 422
    response = client.post(
        "/api/trips",
        json={"title": "X", "start_date": "2026-05-10", "end_date": "2026-05-01"}
    )
    assert response.status_code == 400


def test_currency_is_upper_cased(client):
    response = client.post("/api/trips", json={"title": "Oslo", "base_currency": "nok"})
    assert response.json()["base_currency"] == "NOK"


def test_list_and_get_trips(client, trip):
    assert [t["id"] for t in client.get("/api/trips").json()] == [trip["id"]]

    detail = client.get(f"/api/trips/{trip['id']}").json()
    assert detail["title"] == "Lisbon"
    assert detail["collaborators"] == []


def test_unknown_trip_returns_404(client):
    assert client.get("/api/trips/999").status_code == 404
    assert client.get("/api/settlement/999").status_code == 404
    assert client.get("/api/expenses/999").status_code == 404


def test_delete_trip(client, trip):
    response = client.delete(f"/api/trips/{trip['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == {"trip_id": trip["id"]}
    assert client.get(f"/api/trips/{trip['id']}").status_code == 404


def test_update_members(client, trip):
    response = client.put(
        f"/api/trips/{trip['id']}/members",
        json={"members": ["Alice", "Carol", "Carol"]}
    )
    assert response.status_code == 200
    assert response.json()["members"] == ["Alice", "Carol"]


def test_duplicate_user_email(client, dana):
    response = client.post("/api/users", json={"email": "dana@example.com"})
    assert response.status_code == 400
    assert client.get(f"/api/users/{dana['id']}").json()["display_name"] == "Dana"
    assert client.get("/api/users/999").status_code == 404


def test_trip_owner_is_recorded(client, owned_trip, olivia):
    detail = client.get(f"/api/trips/{owned_trip['id']}").json()

    assert detail["collaborators"] == [{
        "user_id": olivia["id"],
        "email": "olivia@example.com",
        "display_name": "Olivia",
        "role": "owner",
        "status": "active",
    }]
    assert client.post("/api/trips", json={"title": "X", "owner_id": 999}).status_code == 404


def test_participants_union(client, owned_trip, dana, join_trip):
    trip = owned_trip
    join_trip(trip, dana)
    client.post(
        f"/api/expenses/{trip['id']}",
        json={"description": "Ferry", "amount": "12", "payer": "Alice", "split_with": ["Alice", "Guest"]}
    )

    response = client.get(f"/api/trips/{trip['id']}/participants")
    assert response.json() == {
        "trip_id": trip["id"],
        "participants": ["Olivia", "Dana", "Alice", "Bob", "Guest"],
    }
