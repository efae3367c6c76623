import pytest

from contacts_api import models
from tests.helpers import auth_header


@pytest.fixture
def headers(client, token):
    client.cookies.clear()
    return auth_header(token)


def _create(client, headers, name, phone="123456789", **extra):
    response = client.post("/contacts", json={"name": name, "phone": phone, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_contacts_require_auth(client):
    assert client.get("/contacts").status_code == 401
    assert client.post("/contacts", json={"name": "John", "phone": "1"}).status_code == 401


def test_create_contact(client, headers):
    contact = _create(client, headers, "John Doe", email="john@example.com")

    assert contact["name"] == "John Doe"
    assert contact["email"] == "john@example.com"
    assert contact["favorite"] is False
    assert "id" in contact


def test_create_contact_missing_phone(client, db, headers):
    response = client.post("/contacts", json={"name": "John Doe"}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"message": "Missing required phone field"}
    assert db.query(models.Contact).count() == 0


def test_create_contact_empty_body(client, headers):
    response = client.post("/contacts", headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Missing required fields"}


def test_list_contacts_pagination(client, headers):
    for index in range(1, 6):
        _create(client, headers, f"Contact {index}")

    response = client.get("/contacts", params={"page": 2, "limit": 2}, headers=headers)

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Contact 3", "Contact 4"]


def test_list_contacts_defaults_and_favorite_filter(client, headers):
    first = _create(client, headers, "Alice")
    _create(client, headers, "Bob")
    client.patch(f"/contacts/{first['id']}/favorite", json={"favorite": True}, headers=headers)

    assert len(client.get("/contacts", headers=headers).json()) == 2

    favorites = client.get("/contacts", params={"favorite": "true"}, headers=headers).json()
    assert [c["name"] for c in favorites] == ["Alice"]

    others = client.get("/contacts", params={"favorite": "false"}, headers=headers).json()
    assert [c["name"] for c in others] == ["Bob"]


def test_list_contacts_rejects_bad_page(client, headers):
    response = client.get("/contacts", params={"page": 0}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Page must be greater than or equal to 1"}


def test_get_contact(client, headers):
    contact = _create(client, headers, "John Doe")

    response = client.get(f"/contacts/{contact['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json() == contact

    response = client.get("/contacts/9999", headers=headers)
    assert response.status_code == 404
    assert response.json() == {"message": "Contact not found"}


def test_update_contact(client, headers):
    contact = _create(client, headers, "John Doe", email="john@example.com")

    response = client.put(
        f"/contacts/{contact['id']}",
        json={"name": "Jane Doe", "phone": "555"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Jane Doe"
    assert response.json()["phone"] == "555"
    assert response.json()["email"] is None

    response = client.put("/contacts/9999", json={"name": "X", "phone": "1"}, headers=headers)
    assert response.status_code == 404

    response = client.put(f"/contacts/{contact['id']}", json={"name": "X"}, headers=headers)
    assert response.status_code == 400


def test_update_favorite(client, headers):
    contact = _create(client, headers, "John Doe")

    response = client.patch(f"/contacts/{contact['id']}/favorite", json={"favorite": True}, headers=headers)
    assert response.status_code == 200
    assert response.json()["favorite"] is True

    response = client.patch(f"/contacts/{contact['id']}/favorite", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Missing required favorite field"}

    response = client.patch("/contacts/9999/favorite", json={"favorite": False}, headers=headers)
    assert response.status_code == 404


def test_delete_contact(client, headers):
    contact = _create(client, headers, "John Doe")

    response = client.delete(f"/contacts/{contact['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Contact deleted"}

    assert client.get(f"/contacts/{contact['id']}", headers=headers).status_code == 404
    assert client.delete(f"/contacts/{contact['id']}", headers=headers).status_code == 404


def test_out_of_range_contact_id_is_not_found(client, headers):
    huge = 10**20

    assert client.get(f"/contacts/{huge}", headers=headers).status_code == 404
    assert client.delete(f"/contacts/{huge}", headers=headers).status_code == 404
    response = client.patch(f"/contacts/{huge}/favorite", json={"favorite": True}, headers=headers)
    assert response.status_code == 404
    assert response.json() == {"message": "Contact not found"}


def test_oversized_page_or_limit_rejected(client, headers):
    response = client.get("/contacts", params={"limit": 10**20}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"message": "Limit must be less than or equal to 1000000000"}

    response = client.get("/contacts", params={"page": 10**20}, headers=headers)
    assert response.status_code == 400
