from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import StoreError

CREATED_AT = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def seeded(store):
    store.rows["u1"] = {
        "id": "u1",
        "phone_number": "+354123",
        "email": "a@b.is",
        "username": "bob",
        "display_name": None,
        "role": "user",
        "created_at": CREATED_AT,
    }
    return store


def test_get_user_returns_record(client, seeded) -> None:
    response = client.get("/api/users/u1")

    assert response.status_code == 200
    payload = response.json()
    assert payload["id"] == "u1"
    assert payload["email"] == "a@b.is"
    assert payload["role"] == "user"
    assert datetime.fromisoformat(payload["created_at"].replace("Z", "+00:00")) == CREATED_AT


def test_get_missing_user_returns_404(client, store) -> None:
    response = client.get("/api/users/nobody")

    assert response.status_code == 404
    assert response.json()["detail"] == "User with ID nobody not found"


def test_get_user_store_failure_returns_500(client, store) -> None:
    store.fail_with = StoreError("connection refused")

    response = client.get("/api/users/u1")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch user"


def test_patch_updates_display_name_only(client, seeded) -> None:
    response = client.patch("/api/users/u1", json={"display_name": "Bob B."})

    assert response.status_code == 200
    assert response.json()["display_name"] == "Bob B."
    assert seeded.rows["u1"]["role"] == "user"
    assert seeded.mutations == [("update_user", ("u1", {"display_name": "Bob B."}))]


def test_patch_without_fields_returns_400(client, seeded) -> None:
    response = client.patch("/api/users/u1", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "No update data provided"
    assert seeded.mutations == []


def test_patch_rejects_out_of_range_display_name(client, seeded) -> None:
    assert client.patch("/api/users/u1", json={"display_name": ""}).status_code == 422
    assert client.patch("/api/users/u1", json={"display_name": "x" * 101}).status_code == 422


def test_patch_missing_user_returns_404(client, store) -> None:
    response = client.patch("/api/users/nobody", json={"display_name": "Ghost"})

    assert response.status_code == 404


def test_me_and_list_are_not_available_yet(client) -> None:
    assert client.get("/api/users/me").status_code == 401
    assert client.get("/api/users/").status_code == 403


def test_info_endpoints(client) -> None:
    health = client.get("/health").json()
    root = client.get("/").json()

    assert health["status"] == "ok"
    assert health["uptime"] >= 0
    assert root["name"] == "Kontaktar API"
    assert root["status"] == "ok"
