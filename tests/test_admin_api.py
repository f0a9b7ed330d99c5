import pytest

pytestmark = pytest.mark.asyncio


async def test_users_list_with_totals_and_online(client, make_user):
    _, admin_headers = await make_user("boss", role="admin")
    await make_user("staff1", password="pw-123456")
    await make_user("waiting", status="pending")

    r = await client.post("/api/auth/login", json={"email": "staff1@example.com", "password": "pw-123456"})
    staff_headers = {"Authorization": f"Bearer {r.json()['token']}"}
    client.cookies.clear()
    await client.post(
        "/api/game-entries",
        json={"type": "deposit", "game_name": "G", "amount_base": 100, "method": "cashapp", "bonus_rate": 0},
        headers=staff_headers,
    )

    users = (await client.get("/api/admin/users", headers=admin_headers)).json()["users"]
    staff = next(u for u in users if u["username"] == "staff1")
    assert staff["total_deposit"] == 100
    assert staff["is_online"] is True
    assert staff["last_sign_in_at"]

    pending = (await client.get("/api/admin/users", params={"status": "pending"}, headers=admin_headers)).json()
    assert [u["username"] for u in pending["users"]] == ["waiting"]


async def test_delete_user_removes_sessions(client, make_user):
    _, admin_headers = await make_user("boss", role="admin")
    staff, _ = await make_user("staff1", password="pw-123456")
    await client.post("/api/auth/login", json={"email": "staff1@example.com", "password": "pw-123456"})
    client.cookies.clear()

    logins = (await client.get("/api/logins", headers=admin_headers)).json()["sessions"]
    assert [s["username"] for s in logins] == ["staff1"]
    rows = (await client.get("/api/logins/all", headers=admin_headers)).json()["logins"]
    assert rows[0]["name"] == "Staff1"
    assert rows[0]["logout_time"] is None

    r = await client.delete(f"/api/admin/users/{staff.id}", headers=admin_headers)
    assert r.status_code == 200
    assert (await client.get("/api/logins", headers=admin_headers)).json()["sessions"] == []


async def test_admin_routes_forbidden_for_staff(client, make_user):
    _, headers = await make_user()
    assert (await client.get("/api/admin/users", headers=headers)).status_code == 403
    assert (await client.get("/api/logins", headers=headers)).status_code == 403
