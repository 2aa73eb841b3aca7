from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from blog_api.auth.service import decode_access_token
from blog_api.config import settings
from blog_api.errors import InvalidToken
from blog_api.users.service import get_user_by_id, get_user_by_username

pytestmark = pytest.mark.anyio


async def _register(client, username="carol", email=None, password="pa55word"):
    return await client.post(
        "/api/auth/register",
        json={"username": username, "email": email or f"{username}@example.com", "password": password},
    )


async def test_register_creates_regular_user_without_password(client, store):
    resp = await _register(client)

    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["username"] == "carol"
    assert user["role"] == "user"
    assert user["id"]
    assert "password" not in user
    stored = get_user_by_username("carol", store)
    assert stored.password != "pa55word"


async def test_register_ignores_requested_admin_role(client):
    resp = await client.post(
        "/api/auth/register",
        json={"username": "mallory", "email": "m@example.com", "password": "x", "role": "admin"},
    )

    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "user"


async def test_register_rejects_duplicate_username(client):
    assert (await _register(client, "dave", "dave@example.com")).status_code == 201

    resp = await _register(client, "dave", "other@example.com")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Username is already taken"


async def test_register_rejects_duplicate_email(client):
    assert (await _register(client, "erin", "shared@example.com")).status_code == 201

    resp = await _register(client, "frank", "shared@example.com")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Email is already registered"


async def test_register_requires_fields(client):
    resp = await client.post("/api/auth/register", json={"username": "gina"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid request data"
    assert "password" in body["error"]


async def test_login_returns_token_for_valid_credentials(client):
    await _register(client)

    resp = await client.post("/api/auth/login", json={"username": "carol", "password": "pa55word"})

    assert resp.status_code == 200
    body = resp.json()
    assert "password" not in body["user"]
    claims = decode_access_token(body["token"])
    assert claims.username == "carol"
    assert claims.role.value == "user"
    assert claims.id == body["user"]["id"]


async def test_login_failure_does_not_reveal_which_part_was_wrong(client):
    await _register(client)

    wrong_password = await client.post("/api/auth/login", json={"username": "carol", "password": "nope"})
    unknown_user = await client.post("/api/auth/login", json={"username": "nobody", "password": "nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


async def test_profile_requires_token(client):
    resp = await client.get("/api/auth/profile")

    assert resp.status_code == 401
    assert resp.json() == {"message": "Access token is required"}


async def test_profile_rejects_non_bearer_credentials_as_invalid(client):
    basic = await client.get("/api/auth/profile", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    bare_scheme = await client.get("/api/auth/profile", headers={"Authorization": "Bearer"})

    assert basic.status_code == 403
    assert basic.json() == {"message": "Invalid token"}
    assert bare_scheme.status_code == 401


async def test_profile_rejects_tampered_token(client, alice):
    _, headers = alice
    token = headers["Authorization"].split(" ")[1]

    resp = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}x"})

    assert resp.status_code == 403


async def test_profile_rejects_expired_token(client, alice):
    user, _ = alice
    expired = jwt.encode(
        {
            "id": user.id,
            "username": user.username,
            "role": "user",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        },
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    resp = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {expired}"})

    assert resp.status_code == 403


async def test_profile_returns_current_user(client, alice):
    user, headers = alice

    resp = await client.get("/api/auth/profile", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["id"] == user.id
    assert "password" not in resp.json()


async def test_token_of_deleted_user_is_rejected(client, admin_headers, alice):
    user, headers = alice
    assert (await client.delete(f"/api/auth/users/{user.id}", headers=admin_headers)).status_code == 200

    resp = await client.get("/api/auth/profile", headers=headers)

    assert resp.status_code == 403


async def test_list_users_is_admin_only(client, admin_headers, alice):
    _, alice_headers = alice

    forbidden = await client.get("/api/auth/users", headers=alice_headers)
    allowed = await client.get("/api/auth/users", headers=admin_headers)

    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert {u["username"] for u in allowed.json()} == {"admin", "alice"}
    assert all("password" not in u for u in allowed.json())


async def test_admin_changes_role_of_another_user(client, store, admin_headers, alice):
    user, _ = alice

    resp = await client.put(f"/api/auth/users/{user.id}/role", json={"role": "admin"}, headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"
    assert get_user_by_id(user.id, store).role.value == "admin"


async def test_role_change_validates_role(client, admin_headers, alice):
    user, _ = alice

    resp = await client.put(f"/api/auth/users/{user.id}/role", json={"role": "owner"}, headers=admin_headers)

    assert resp.status_code == 400


async def test_role_change_unknown_user(client, admin_headers):
    resp = await client.put("/api/auth/users/missing/role", json={"role": "user"}, headers=admin_headers)

    assert resp.status_code == 404


async def test_admin_cannot_demote_or_delete_self(client, store, admin):
    user, headers = admin

    demote = await client.put(f"/api/auth/users/{user.id}/role", json={"role": "user"}, headers=headers)
    delete = await client.delete(f"/api/auth/users/{user.id}", headers=headers)

    assert demote.status_code == 400
    assert delete.status_code == 400
    stored = get_user_by_id(user.id, store)
    assert stored is not None
    assert stored.role.value == "admin"


async def test_regular_user_cannot_delete_users(client, alice, bob):
    _, alice_headers = alice
    bob_user, _ = bob

    resp = await client.delete(f"/api/auth/users/{bob_user.id}", headers=alice_headers)

    assert resp.status_code == 403


def test_decode_rejects_token_signed_with_other_secret():
    token = jwt.encode(
        {"id": "u1", "username": "x", "role": "admin", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        "another-secret",
        algorithm="HS256",
    )

    with pytest.raises(InvalidToken):
        decode_access_token(token)


def test_decode_rejects_token_without_identity_claims():
    token = jwt.encode(
        {"sub": "x", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(InvalidToken):
        decode_access_token(token)
