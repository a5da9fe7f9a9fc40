"""Registration, login and own-profile endpoints"""

from datetime import timedelta

import pytest
from jose import jwt

from core.config import settings
from services.auth_service import AuthService, AuthenticationError


class StubUser:
    id = 7
    username = "alice"
    email = "alice@example.com"


def test_token_round_trip():
    service = AuthService()
    token = service.create_access_token(StubUser())

    identity = service.verify_token(token)
    assert identity.id == 7
    assert identity.username == "alice"
    assert identity.email == "alice@example.com"


def test_expired_token_rejected():
    service = AuthService()
    token = service.create_access_token(StubUser(), expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthenticationError):
        service.verify_token(token)


def test_token_signed_with_other_secret_rejected():
    service = AuthService()
    token = jwt.encode({"id": 7, "username": "alice", "type": "access"}, "some-other-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        service.verify_token(token)


def test_password_hashing():
    service = AuthService()
    hashed = service.get_password_hash("secret123")
    assert hashed != "secret123"
    assert service.verify_password("secret123", hashed)
    assert not service.verify_password("wrong", hashed)


def test_register_returns_token_and_user(client):
    res = client.post("/api/auth/register", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret123",
        "fullName": "Alice Cook",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["username"] == "alice"
    assert body["user"]["fullName"] == "Alice Cook"
    assert "passwordHash" not in body["user"]

    payload = jwt.decode(body["token"], settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["id"] == body["user"]["id"]


def test_register_missing_fields(client):
    res = client.post("/api/auth/register", json={"username": "alice"})
    assert res.status_code == 400
    assert res.json() == {"message": "Username, email, and password are required"}


def test_register_invalid_email(client):
    res = client.post("/api/auth/register", json={
        "username": "alice", "email": "not-an-email", "password": "secret123",
    })
    assert res.status_code == 400
    assert "errors" in res.json()


def test_register_duplicate(client, make_user):
    make_user("alice")
    res = client.post("/api/auth/register", json={
        "username": "alice", "email": "other@example.com", "password": "secret123",
    })
    assert res.status_code == 400
    assert res.json() == {"message": "Username or email already exists"}


def test_login_by_username_or_email(client, make_user):
    make_user("alice", password="secret123")

    res = client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"
    assert res.json()["token"]

    res = client.post("/api/auth/login", json={"username": "alice@example.com", "password": "secret123"})
    assert res.status_code == 200


def test_login_failures(client, make_user):
    make_user("alice", password="secret123")

    res = client.post("/api/auth/login", json={"username": "alice"})
    assert res.status_code == 400

    res = client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid credentials"}
    assert res.headers["www-authenticate"] == "Bearer"

    res = client.post("/api/auth/login", json={"username": "nobody", "password": "secret123"})
    assert res.status_code == 401


def test_profile_get_and_update(client, make_user):
    alice = make_user("alice")

    assert client.get("/api/auth/profile").status_code == 401

    res = client.get("/api/auth/profile", headers=alice["headers"])
    assert res.status_code == 200
    assert res.json()["user"]["username"] == "alice"

    res = client.put(
        "/api/auth/profile",
        json={"fullName": "Alice Cook", "bio": "I bake"},
        headers=alice["headers"],
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Profile updated successfully"
    assert body["user"]["fullName"] == "Alice Cook"
    assert body["user"]["bio"] == "I bake"


def test_profile_update_empty_body_clears_fields(client, make_user):
    alice = make_user("alice", full_name="Alice Cook")
    client.put("/api/auth/profile", json={"bio": "I bake"}, headers=alice["headers"])

    # Omitted fields are cleared, not kept
    res = client.put("/api/auth/profile", json={}, headers=alice["headers"])
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["fullName"] == ""
    assert user["bio"] == ""

    profile = client.get("/api/auth/profile", headers=alice["headers"]).json()["user"]
    assert (profile["fullName"], profile["bio"]) == ("", "")
