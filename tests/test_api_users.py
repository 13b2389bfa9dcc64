"""Users API: registration, password login, refresh, self-service and admin."""

import pytest
from sqlalchemy import update

from studentms.core.config import get_settings
from studentms.core.limiter import limiter
from studentms.models.user import User


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_register(anon_client):
    r = await anon_client.post(
        "/api/v1/users/register",
        json={"email": "Bob@Example.com", "username": "bob", "password": "longenough"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["email"] == "bob@example.com"
    assert body["role"] == "student"
    assert body["is_verified"] is False
    assert "hashed_password" not in body


@pytest.mark.asyncio
async def test_register_duplicate(anon_client, make_user):
    await make_user(username="bob")
    r = await anon_client.post(
        "/api/v1/users/register",
        json={"email": "bob@example.com", "username": "bobby", "password": "longenough"},
    )
    assert r.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(anon_client):
    r = await anon_client.post(
        "/api/v1/users/register",
        json={"email": "c@example.com", "username": "c1", "password": "short"},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_login_by_username_and_email(anon_client, make_user, read_cookies):
    user = await make_user()

    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "alice", "password": "correct-horse"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == str(user.id)
    cookies = read_cookies(r)
    assert cookies["access_token"] == body["access_token"]
    assert cookies["refresh_token"] == body["refresh_token"]

    anon_client.cookies.clear()
    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "ALICE@example.com", "password": "correct-horse"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(anon_client, make_user):
    await make_user()
    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "alice", "password": "nope-nope"}
    )
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_unknown_user(anon_client):
    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "ghost", "password": "whatever1"}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_disabled_account(anon_client, make_user):
    await make_user(is_active=False)
    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "alice", "password": "correct-horse"}
    )
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_login_rate_limited(anon_client):
    limit = int(get_settings().login_rate_limit.split("/")[0])
    limiter.reset()
    statuses = []
    for _ in range(limit + 1):
        r = await anon_client.post(
            "/api/v1/users/login", data={"username": "ghost", "password": "whatever1"}
        )
        statuses.append(r.status_code)
    assert statuses[:limit] == [401] * limit
    assert statuses[-1] == 429


@pytest.mark.asyncio
async def test_protected_route_requires_auth(anon_client):
    r = await anon_client.get("/api/v1/users/current-user")
    assert r.status_code == 401

    r = await anon_client.get("/api/v1/students")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_garbage_bearer_rejected(anon_client):
    r = await anon_client.get("/api/v1/users/current-user", headers=_bearer("not-a-jwt"))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_current_user_via_bearer(anon_client, make_user, login):
    await make_user()
    tokens = await login("alice")
    r = await anon_client.get("/api/v1/users/current-user", headers=_bearer(tokens["access_token"]))
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_current_user_via_cookie(anon_client, make_user):
    await make_user()
    r = await anon_client.post(
        "/api/v1/users/login", data={"username": "alice", "password": "correct-horse"}
    )
    assert r.status_code == 200
    # The client's cookie jar now carries access_token
    me = await anon_client.get("/api/v1/users/current-user")
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_refresh_token_from_body(anon_client, make_user, login):
    user = await make_user()
    tokens = await login("alice")
    r = await anon_client.post(
        "/api/v1/users/refresh-token", json={"refresh_token": tokens["refresh_token"]}
    )
    assert r.status_code == 200
    assert r.json()["user"]["id"] == str(user.id)
    assert r.json()["access_token"]


@pytest.mark.asyncio
async def test_refresh_token_from_cookie(anon_client, make_user):
    await make_user()
    await anon_client.post(
        "/api/v1/users/login", data={"username": "alice", "password": "correct-horse"}
    )
    r = await anon_client.post("/api/v1/users/refresh-token")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_refresh_token_missing(anon_client):
    r = await anon_client.post("/api/v1/users/refresh-token")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_logout_clears_cookies(anon_client, read_cookies):
    r = await anon_client.post("/api/v1/users/logout")
    assert r.status_code == 204
    cookies = read_cookies(r)
    assert cookies["access_token"] == ""
    assert cookies["refresh_token"] == ""
    assert cookies["studentms_session"] == ""


@pytest.mark.asyncio
async def test_update_account_and_change_password(anon_client, make_user, login):
    await make_user()
    tokens = await login("alice")
    headers = _bearer(tokens["access_token"])

    r = await anon_client.patch(
        "/api/v1/users/update-account", json={"full_name": "Alice Liddell"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["full_name"] == "Alice Liddell"

    r = await anon_client.post(
        "/api/v1/users/change-password",
        json={"old_password": "wrong-old", "new_password": "brand-new-pass"},
        headers=headers,
    )
    assert r.status_code == 400

    r = await anon_client.post(
        "/api/v1/users/change-password",
        json={"old_password": "correct-horse", "new_password": "brand-new-pass"},
        headers=headers,
    )
    assert r.status_code == 204

    await login("alice", "brand-new-pass")


@pytest.mark.asyncio
async def test_admin_user_management(anon_client, make_user, login):
    await make_user(username="root", role="admin")
    await make_user(username="alice")
    admin = _bearer((await login("root"))["access_token"])

    r = await anon_client.post(
        "/api/v1/users",
        json={
            "email": "teach@example.com",
            "username": "teach",
            "password": "longenough",
            "role": "teacher",
        },
        headers=admin,
    )
    assert r.status_code == 201
    teacher_id = r.json()["id"]
    assert r.json()["is_verified"] is True

    r = await anon_client.get("/api/v1/users", headers=admin)
    assert r.status_code == 200
    assert r.json()["total"] == 3

    r = await anon_client.patch(
        f"/api/v1/users/{teacher_id}", json={"is_active": False}, headers=admin
    )
    assert r.status_code == 200
    assert r.json()["is_active"] is False

    r = await anon_client.delete(f"/api/v1/users/{teacher_id}", headers=admin)
    assert r.status_code == 204
    r = await anon_client.get(f"/api/v1/users/{teacher_id}", headers=admin)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(anon_client, make_user, login):
    root = await make_user(username="root", role="admin")
    admin = _bearer((await login("root"))["access_token"])
    r = await anon_client.delete(f"/api/v1/users/{root.id}", headers=admin)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_student_cannot_manage_users(anon_client, make_user, login):
    root = await make_user(username="root", role="admin")
    alice = await make_user(username="alice")
    headers = _bearer((await login("alice"))["access_token"])

    assert (await anon_client.get("/api/v1/users", headers=headers)).status_code == 403
    assert (await anon_client.get(f"/api/v1/users/{root.id}", headers=headers)).status_code == 403
    assert (await anon_client.get(f"/api/v1/users/{alice.id}", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_disabled_user_token_rejected(anon_client, make_user, login, engine):
    alice = await make_user()
    tokens = await login("alice")

    async with engine.begin() as conn:
        await conn.execute(update(User).where(User.id == alice.id).values(is_active=False))

    r = await anon_client.get("/api/v1/users/current-user", headers=_bearer(tokens["access_token"]))
    assert r.status_code == 403
