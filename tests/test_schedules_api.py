import pytest

pytestmark = pytest.mark.asyncio


def _shift(**kw):
    body = {"usernames": ["staff1"], "day": "Monday", "start_time": "09:00 AM", "end_time": "05:00 PM", "title": "Day"}
    body.update(kw)
    return body


async def test_schedule_crud_and_order(client, make_user):
    _, admin_headers = await make_user("boss", role="admin")
    _, headers = await make_user("staff1")

    for body in (
        _shift(day="Wednesday"),
        _shift(day="Monday", start_time="10:00 AM"),
        _shift(day="Monday", usernames=["staff2"]),
    ):
        assert (await client.post("/api/schedules", json=body, headers=admin_headers)).status_code == 201

    r = await client.get("/api/schedules", params={"username": "staff1"}, headers=headers)
    days = [(s["day"], s["start_time"]) for s in r.json()["schedules"]]
    assert days == [("Monday", "10:00 AM"), ("Wednesday", "09:00 AM")]

    sid = r.json()["schedules"][0]["id"]
    r = await client.put(f"/api/schedules/{sid}", json=_shift(title="Night"), headers=admin_headers)
    assert r.json()["title"] == "Night"
    assert (await client.delete(f"/api/schedules/{sid}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/schedules/{sid}", headers=admin_headers)).status_code == 404


async def test_schedule_validation(client, make_user):
    _, admin_headers = await make_user("boss", role="admin")
    r = await client.post("/api/schedules", json=_shift(usernames=[]), headers=admin_headers)
    assert r.status_code == 400
    r = await client.post("/api/schedules", json=_shift(day="Someday"), headers=admin_headers)
    assert r.status_code == 400


async def test_schedule_writes_admin_only(client, make_user):
    _, headers = await make_user("staff1")
    assert (await client.post("/api/schedules", json=_shift(), headers=headers)).status_code == 403
