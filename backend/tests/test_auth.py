from datetime import timedelta

from app.models.user import User
from app.services.auth_service import verify_password
from app.services.token_service import TokenService
from tests.conftest import TEST_LEGACY_SECRET, TEST_SECRET, auth_headers


def _register(client, username="alice", email="a@x.com", password="secret1"):
    return client.post("/auth/register", json={"username": username, "email": email, "password": password})


def test_register_success_hashes_password(client, db):
    resp = _register(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["user"] == {"id": data["user"]["id"], "username": "alice", "email": "a@x.com"}
    assert "password" not in data["user"]

    stored = db.query(User).filter(User.username == "alice").first()
    assert stored.password != "secret1"
    assert verify_password("secret1", stored.password)
    assert not verify_password("secret2", stored.password)


def test_register_token_verifies_with_same_id(client, token_service):
    resp = _register(client)
    data = resp.json()
    result = token_service.verify_token(data["token"])
    assert result.ok
    assert result.claims["id"] == data["user"]["id"]


def test_register_missing_fields(client):
    resp = client.post("/auth/register", json={"username": "alice", "email": "a@x.com"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Username, email, and password are required"


def test_register_validation_rules(client):
    assert _register(client, username="al").status_code == 400
    assert _register(client, password="12345").status_code == 400
    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, email="a@x").status_code == 400


def test_register_duplicate_username_or_email_conflict(client):
    assert _register(client).status_code == 201
    dup_username = _register(client, email="other@x.com")
    assert dup_username.status_code == 409
    assert dup_username.json()["code"] == "CONFLICT"
    assert _register(client, username="other").status_code == 409


def test_login_with_email_and_username(client, seed_users):
    by_email = client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
    assert by_email.status_code == 200
    assert by_email.json()["user"]["username"] == "alice"

    by_username = client.post("/auth/login", json={"email": "alice", "password": "secret1"})
    assert by_username.status_code == 200

    by_identifier = client.post("/auth/login", json={"identifier": "alice", "password": "secret1"})
    assert by_identifier.status_code == 200


def test_login_wrong_password_and_unknown_user_are_indistinguishable(client, seed_users):
    wrong = client.post("/auth/login", json={"email": "a@x.com", "password": "wrong"})
    unknown = client.post("/auth/login", json={"email": "nobody@x.com", "password": "secret1"})
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["error"] == unknown.json()["error"]


def test_login_missing_fields(client):
    resp = client.post("/auth/login", json={"email": "a@x.com"})
    assert resp.status_code == 400


def test_me_authenticated(client, seed_users):
    headers = auth_headers(client, "alice")
    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["username"] == "alice"
    assert user["email"] == "a@x.com"
    assert "password" not in user


def test_me_missing_token(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["code"] == "MISSING_TOKEN"


def test_me_invalid_token(client):
    resp = client.get("/auth/me", headers={"Authorization": "Bearer garbage.token.value"})
    assert resp.status_code == 403
    assert resp.json()["code"] == "INVALID_TOKEN"


def test_me_expired_token(client, seed_users):
    alice = seed_users["alice"]
    token = TokenService([TEST_SECRET]).issue_token(
        {"id": alice.id, "username": alice.username, "email": alice.email},
        ttl=timedelta(seconds=-60),
    )
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "TOKEN_EXPIRED"


def test_me_accepts_token_signed_with_legacy_secret(client, seed_users):
    alice = seed_users["alice"]
    token = TokenService([TEST_LEGACY_SECRET]).issue_token(
        {"id": alice.id, "username": alice.username, "email": alice.email},
    )
    resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == alice.id


def test_me_user_deleted_returns_not_found(client, db, seed_users):
    headers = auth_headers(client, "carol")
    db.delete(seed_users["carol"])
    db.commit()
    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 404


def test_change_password_flow(client, seed_users):
    headers = auth_headers(client, "alice")
    resp = client.post(
        "/auth/change-password",
        headers=headers,
        json={"currentPassword": "secret1", "newPassword": "secret2"},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Password changed successfully"

    assert client.post("/auth/login", json={"email": "alice", "password": "secret1"}).status_code == 401
    assert client.post("/auth/login", json={"email": "alice", "password": "secret2"}).status_code == 200


def test_change_password_wrong_current(client, seed_users):
    headers = auth_headers(client, "alice")
    resp = client.post(
        "/auth/change-password",
        headers=headers,
        json={"currentPassword": "nope", "newPassword": "secret2"},
    )
    assert resp.status_code == 401


def test_change_password_validation(client, seed_users):
    headers = auth_headers(client, "alice")
    short = client.post(
        "/auth/change-password",
        headers=headers,
        json={"currentPassword": "secret1", "newPassword": "123"},
    )
    assert short.status_code == 400
    missing = client.post("/auth/change-password", headers=headers, json={"currentPassword": "secret1"})
    assert missing.status_code == 400


def test_change_password_requires_auth(client):
    resp = client.post("/auth/change-password", json={"currentPassword": "a", "newPassword": "bbbbbb"})
    assert resp.status_code == 401
