import pytest

pytestmark = pytest.mark.asyncio


async def test_register_then_approval_gates_login(client, make_user):
    r = await client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": "secret-pw", "name": "New"},
    )
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["status"] == "pending"
    assert user["username"] == "new"

    r = await client.post("/api/auth/login", json={"email": "new@example.com", "password": "secret-pw"})
    assert r.status_code == 403

    _, admin_headers = await make_user("boss", role="admin")
    r = await client.patch(f"/api/admin/users/{user['id']}/approve", headers=admin_headers)
    assert r.status_code == 200

    r = await client.post("/api/auth/login", json={"email": "new@example.com", "password": "secret-pw"})
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert "coinstore_session" in r.headers.get("set-cookie", "")

    r = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "new@example.com"


async def test_register_duplicate_is_conflict(client):
    payload = {"email": "dup@example.com", "password": "pw"}
    assert (await client.post("/api/auth/register", json=payload)).status_code == 201
    r = await client.post("/api/auth/register", json=payload)
    assert r.status_code == 409
    assert r.json()["message"] == "User already exists"


async def test_bad_password(client, make_user):
    await make_user("staff1")
    r = await client.post("/api/auth/login", json={"email": "staff1@example.com", "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


async def test_logout_invalidates_token(client, make_user):
    await make_user("staff1", password="pw-123456")
    r = await client.post("/api/auth/login", json={"email": "staff1@example.com", "password": "pw-123456"})
    headers = {"Authorization": f"Bearer {r.json()['token']}"}

    assert (await client.post("/api/auth/logout", headers=headers)).status_code == 200
    client.cookies.clear()
    r = await client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401


async def test_me_requires_session(client):
    r = await client.get("/api/auth/me")
    assert r.status_code == 401
    r = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401


async def test_blocked_user_is_forbidden(client, make_user):
    staff, headers = await make_user("staff1")
    _, admin_headers = await make_user("boss", role="admin")
    r = await client.patch(f"/api/admin/users/{staff.id}/block", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["user"]["status"] == "blocked"
    # blocking bumps the session version, so the old token is dead
    r = await client.get("/api/auth/me", headers=headers)
    assert r.status_code == 401
    r = await client.post("/api/auth/login", json={"email": "staff1@example.com", "password": "pw-123456"})
    assert r.status_code == 403
