from __future__ import annotations

from tests.conftest import PASSWORD


def _login(client, username, password=PASSWORD):
    return client.post("/auth/login", json={"username": username, "password": password})


def test_health(client):
    assert client.get("/health").get_json() == {"success": True, "data": {"status": "ok"}}


def test_login_and_me(client):
    resp = _login(client, "omar")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["token_type"] == "bearer"
    assert body["data"]["role"] == "Member"
    assert "password_hash" not in body["data"]["user"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"})
    assert me.get_json()["data"]["username"] == "omar"


def test_bad_login_is_401(client):
    resp = _login(client, "omar", "wrong")
    assert resp.status_code == 401
    assert resp.get_json() == {
        "success": False,
        "error": {"kind": "authentication_error", "message": "Invalid credentials"},
    }


def test_missing_or_invalid_token_is_401(client):
    assert client.get("/prayers").status_code == 401
    resp = client.get("/prayers", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "authentication_error"


def test_role_guard_is_403(client, people, auth_headers):
    resp = client.post("/feeds", json={"title": "t", "content": "c"}, headers=auth_headers(people.member))
    assert resp.status_code == 403
    assert resp.get_json()["error"]["kind"] == "authorization_error"

    resp = client.get("/prayers/stats/global", headers=auth_headers(people.founder))
    assert resp.status_code == 403


def test_schema_errors_are_400(client, people, auth_headers):
    resp = client.post(
        "/prayers",
        json={"prayerDate": "2026-03-10", "prayers": {"Tahajjud": "prayed"}},
        headers=auth_headers(people.member),
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "validation_error"


def test_record_prayers_accepts_camel_case(client, people, auth_headers):
    resp = client.post(
        "/prayers",
        json={"prayerDate": "2026-03-10", "prayers": {"fajr": "Prayed", "Isha": "missed"}, "location": "mosque"},
        headers=auth_headers(people.member),
    )
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert [(r["prayer_type"], r["status"]) for r in data] == [("Fajr", "prayed"), ("Isha", "missed")]


def test_unknown_route_is_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["kind"] == "not_found"


def test_pickup_flow_over_http(client, people, auth_headers):
    member, founder = auth_headers(people.member), auth_headers(people.founder)

    created = client.post(
        "/pickup-requests",
        json={"pickupLocation": "12 Mosque Road", "days": ["Monday", "friday"]},
        headers=member,
    )
    assert created.status_code == 201
    req = created.get_json()["data"]
    assert req["status"] == "pending"
    assert req["allowed_actions"] == ["approve", "reject", "cancel"]

    approved = client.patch(
        f"/pickup-requests/{req['id']}",
        json={"action": "approve", "driverId": people.driver.user_id},
        headers=founder,
    )
    assert approved.status_code == 200
    assert approved.get_json()["data"]["status"] == "approved"
    assert approved.get_json()["data"]["assigned_driver_name"] == "Yusuf Test"

    again = client.patch(f"/pickup-requests/{req['id']}", json={"action": "approve", "driverName": "X"}, headers=founder)
    assert again.status_code == 409
    assert again.get_json()["error"]["kind"] == "conflict"

    driver = auth_headers(people.driver)
    assert client.patch(f"/pickup-requests/{req['id']}", json={"action": "start"}, headers=driver).status_code == 200
    done = client.patch(f"/pickup-requests/{req['id']}", json={"action": "complete"}, headers=driver)
    assert done.get_json()["data"]["status"] == "completed"
    assert done.get_json()["data"]["allowed_actions"] == []

    history = client.get(f"/pickup-requests/{req['id']}/history", headers=member).get_json()["data"]
    assert [h["change_type"] for h in history] == ["created", "assigned", "started", "completed"]


def test_member_listing_is_paginated(client, people, auth_headers):
    resp = client.get("/members?page=1&limit=2", headers=auth_headers(people.admin))
    body = resp.get_json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 7, "total_pages": 4}


def test_founder_edits_area_over_http(client, people, auth_headers):
    resp = client.put(
        "/areas/1",
        json={"mosqueName": "Masjid An-Nur", "prayerTimes": {"fajr": "05:20"}},
        headers=auth_headers(people.founder),
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["mosque_name"] == "Masjid An-Nur"
    assert data["prayer_times"]["Fajr"] == "05:20"

    other = client.put("/areas/1", json={"areaName": "Nord"}, headers=auth_headers(people.south_founder))
    assert other.status_code == 403
    member = client.put("/areas/1", json={"areaName": "Nord"}, headers=auth_headers(people.member))
    assert member.status_code == 403


def test_wake_up_calls_over_http(client, people, auth_headers):
    answered = client.post("/wake-up-calls", json={"callResponse": "Accepted"}, headers=auth_headers(people.member))
    assert answered.status_code == 201
    assert answered.get_json()["data"]["call_response"] == "accepted"

    bad = client.post("/wake-up-calls", json={"callResponse": "maybe"}, headers=auth_headers(people.member))
    assert bad.status_code == 400

    assert client.get("/wake-up-calls", headers=auth_headers(people.member)).status_code == 403

    listed = client.get("/wake-up-calls?status=accepted", headers=auth_headers(people.founder)).get_json()
    assert [c["username"] for c in listed["data"]] == ["omar"]
    assert listed["pagination"]["total"] == 1

    stats = client.get("/wake-up-calls/stats?date_from=2026-03-01", headers=auth_headers(people.founder)).get_json()
    assert stats["data"]["total_calls"] == 1
    assert stats["data"]["acceptance_rate"] == 100.0
