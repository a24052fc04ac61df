import jwt

from conftest import PASSWORD, login, register


def test_register_and_login(client):
    user_id = register(client, email="Sara@Example.com")

    resp = client.post("/login", json={"email": "sara@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["user"] == {
        "id": user_id,
        "first_name": "Sara",
        "last_name": "Benali",
        "email": "sara@example.com",
        "role": "student",
    }

    claims = jwt.decode(data["token"], "test-secret", algorithms=["HS256"])
    assert claims["sub"] == str(user_id)
    assert claims["id"] == user_id
    assert claims["role"] == "student"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60


def test_register_duplicate_email(client):
    register(client)
    resp = client.post(
        "/inscription",
        json={
            "first_name": "Other",
            "last_name": "Person",
            "email": "STUDENT@example.com",
            "password": PASSWORD,
        },
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "DuplicateEmail"


def test_register_rejects_short_password(client):
    resp = client.post(
        "/inscription",
        json={"first_name": "A", "last_name": "B", "email": "a@example.com", "password": "123"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "ValidationError"
    assert any("password" in err["loc"] for err in body["detail"])


def test_login_wrong_password(client):
    register(client)
    resp = client.post("/login", json={"email": "student@example.com", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidCredentials"


def test_login_unknown_email(client):
    resp = client.post("/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert resp.status_code == 401


def test_protected_route_requires_token(client):
    resp = client.get("/profile")
    assert resp.status_code == 401
    assert resp.json()["error"] == "AuthenticationError"


def test_invalid_token_rejected(client):
    resp = client.get("/profile", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidToken"


def test_x_auth_token_header_accepted(client, student):
    _, headers = student
    token = headers["Authorization"].split(" ", 1)[1]
    resp = client.get("/profile", headers={"x-auth-token": token})
    assert resp.status_code == 200
    assert resp.json()["email"] == "student@example.com"


def test_change_password(client, student):
    _, headers = student
    resp = client.post(
        "/change-password",
        json={"current_password": PASSWORD, "new_password": "another-secret"},
        headers=headers,
    )
    assert resp.status_code == 200

    resp = client.post("/login", json={"email": "student@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    login(client, password="another-secret")


def test_change_password_alias_and_wrong_current(client, student):
    _, headers = student
    resp = client.post(
        "/users/change-password",
        json={"current_password": "wrong-one", "new_password": "another-secret"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValidationError"


def test_change_password_must_differ(client, student):
    _, headers = student
    resp = client.post(
        "/change-password",
        json={"current_password": PASSWORD, "new_password": PASSWORD},
        headers=headers,
    )
    assert resp.status_code == 400
