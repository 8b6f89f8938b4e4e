from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_identity_creates_user(store, google):
    response = client.post("/auth/identity", json={"credential": "alice-token"})

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert user["id"] in store.users


def test_identity_is_stable_across_sign_ins(store, google):
    first = client.post("/auth/identity", json={"credential": "alice-token"}).json()
    second = client.post("/auth/identity", json={"credential": "alice-token"}).json()

    assert first["user"]["id"] == second["user"]["id"]


def test_google_alias_accepts_access_token_field(store, google):
    response = client.post("/auth/google", json={"accessToken": "bob-token"})

    assert response.status_code == 200
    assert response.json()["message"] == "Login successful"
    assert response.json()["user"]["email"] == "Bob@Example.com"


def test_rejected_credential_is_401(store, google):
    response = client.post("/auth/identity", json={"credential": "forged"})

    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credential"
    assert store.users == {}


def test_missing_credential_is_validation_error(store, google):
    response = client.post("/auth/identity", json={})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_me_requires_bearer(store, google):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["code"] == "invalid_credential"


def test_me_returns_resolved_user(store, google):
    response = client.get("/auth/me", headers={"Authorization": "Bearer carol-token"})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "carol@example.com"


def test_request_id_is_echoed(store, google):
    response = client.get("/auth/me", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_second_account_with_same_email_is_409(store, google):
    client.post("/auth/identity", json={"credential": "carol-token"})
    google.register("carol-work-token", sub="google-carol-work", email="Carol@example.com")

    response = client.post("/auth/identity", json={"credential": "carol-work-token"})

    assert response.status_code == 409
    assert response.json()["code"] == "email_in_use"
    assert len(store.users) == 1
