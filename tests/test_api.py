import datetime as dt

from tests.conftest import T0

VERIFIED = {"X-Student-Verified": "true"}


def _iso(value: dt.datetime) -> str:
    return value.isoformat()


def _create(client, *, starts_in=60, lasts=60, capacity=None, title="Talk"):
    start = T0 + dt.timedelta(minutes=starts_in)
    r = client.post(
        "/api/v1/events/",
        json={"title": title, "start_time": _iso(start), "end_time": _iso(start + dt.timedelta(minutes=lasts)), "capacity": capacity},
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_create_and_fetch_event(client):
    body = _create(client, capacity=3)
    assert body["state"] == "upcoming"
    assert body["registration_count"] == 0

    r = client.get(f"/api/v1/events/{body['id']}")
    assert r.status_code == 200
    assert r.json()["capacity"] == 3


def test_unknown_event_is_404_with_error_body(client):
    r = client.get("/api/v1/events/999")
    assert r.status_code == 404
    assert r.json()["code"] == "EVENT_NOT_FOUND"
    assert r.json()["details"] == {"event_id": 999}


def test_create_rejects_inverted_window(client):
    r = client.post(
        "/api/v1/events/",
        json={"title": "bad", "start_time": _iso(T0), "end_time": _iso(T0 - dt.timedelta(minutes=1))},
    )
    assert r.status_code == 422
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_patch_cannot_set_state(client):
    event = _create(client)
    r = client.patch(f"/api/v1/events/{event['id']}", json={"state": "past"})
    assert r.status_code == 422
    assert client.get(f"/api/v1/events/{event['id']}").json()["state"] == "upcoming"


def test_patch_updates_title(client):
    event = _create(client)
    r = client.patch(f"/api/v1/events/{event['id']}", json={"title": "Renamed"})
    assert r.status_code == 200
    assert r.json()["title"] == "Renamed"


def test_registration_flow(client):
    event = _create(client, capacity=1)
    url = f"/api/v1/events/{event['id']}/registrations"

    assert client.post(f"{url}/1").status_code == 403
    r = client.post(f"{url}/1", headers=VERIFIED)
    assert r.status_code == 201
    assert r.json()["student_id"] == 1

    assert client.post(f"{url}/1", headers=VERIFIED).json()["code"] == "DUPLICATE_RELATIONSHIP"
    full = client.post(f"{url}/2", headers=VERIFIED)
    assert full.status_code == 409
    assert full.json()["code"] == "CAPACITY_EXCEEDED"

    assert [r["student_id"] for r in client.get(url).json()] == [1]
    assert client.delete(f"{url}/1").status_code == 204
    assert client.delete(f"{url}/1").status_code == 404
    assert client.get(f"/api/v1/events/{event['id']}").json()["registration_count"] == 0


def test_manual_sweep_and_join(client, clock):
    event = _create(client, starts_in=10, lasts=30)
    client.post(f"/api/v1/events/{event['id']}/registrations/1", headers=VERIFIED)

    clock.advance(minutes=10)
    r = client.post("/api/v1/transitions/run", json={"now": _iso(clock())})
    assert r.status_code == 200
    assert r.json() == {"transitioned_to_ongoing": 1, "transitioned_to_past": 0, "failed_event_ids": []}

    joined = client.post(f"/api/v1/events/{event['id']}/participations/2")
    assert joined.status_code == 201
    assert client.post(f"/api/v1/events/{event['id']}/registrations/3", headers=VERIFIED).json()["code"] == "INVALID_STATE"
    assert client.delete(f"/api/v1/events/{event['id']}/registrations/1").status_code == 400

    participations = client.get(f"/api/v1/events/{event['id']}/participations").json()
    assert {p["student_id"] for p in participations} == {1, 2}

    client.post("/api/v1/transitions/run", json={"now": _iso(T0 + dt.timedelta(minutes=40))})
    attendances = client.get(f"/api/v1/events/{event['id']}/attendances").json()
    assert sorted((a["student_id"], a["duration_minutes"]) for a in attendances) == [(1, 30), (2, 30)]
    assert client.delete(f"/api/v1/events/{event['id']}").json()["code"] == "PROTECTED_DELETION"


def test_sweep_without_body_uses_clock(client, clock):
    event = _create(client, starts_in=5)
    clock.advance(minutes=5)
    assert client.post("/api/v1/transitions/run").json()["transitioned_to_ongoing"] == 1
    assert client.get(f"/api/v1/events/{event['id']}").json()["state"] == "ongoing"


def test_student_upcoming_is_paginated(client):
    for i in range(3):
        _create(client, starts_in=10 * (i + 1), title=f"e{i}")

    r = client.get("/api/v1/students/5/events/upcoming", params={"page": 2, "per_page": 2})
    assert r.status_code == 200
    body = r.json()
    assert [e["title"] for e in body["data"]] == ["e2"]
    assert body["meta"] == {"current_page": 2, "per_page": 2, "total": 3, "last_page": 2}


def test_student_status(client):
    event = _create(client)
    client.post(f"/api/v1/events/{event['id']}/registrations/4", headers=VERIFIED)

    body = client.get(f"/api/v1/students/4/events/{event['id']}/status").json()
    assert body["event"]["id"] == event["id"]
    assert body["student_status"]["is_registered"] is True
    assert body["student_status"]["registration"]["student_id"] == 4
    assert body["student_status"]["attendance"] is None


def test_list_events_by_state(client):
    _create(client, starts_in=-5, title="now")
    _create(client, starts_in=30, title="soon")
    client.post("/api/v1/transitions/run")

    assert [e["title"] for e in client.get("/api/v1/events/", params={"state": "ongoing"}).json()] == ["now"]
    assert len(client.get("/api/v1/events/").json()) == 2


def test_delete_upcoming_event(client):
    event = _create(client)
    assert client.delete(f"/api/v1/events/{event['id']}").status_code == 204
    assert client.get(f"/api/v1/events/{event['id']}").status_code == 404
