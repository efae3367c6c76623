def signup(client, email="ann@example.com", password="secret1", first_name="Ann", last_name="Lee"):
    return client.post(
        "/users/signup",
        json={"firstName": first_name, "lastName": last_name, "email": email, "password": password},
    )


def login(client, email="ann@example.com", password="secret1"):
    response = client.post("/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}
